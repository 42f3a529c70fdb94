"""Decoding of raw activity rows into typed actions."""

from datetime import UTC, datetime
from typing import Any

from dateutil import parser as date_parser

from .errors import ActionDecodeError
from .logging_config import create_execution_logger
from .models import (
    Action,
    ApprovePullRequestAction,
    ClosePullRequestAction,
    CloseIssueAction,
    CommentIssueAction,
    CommentPullAction,
    CommitRepoAction,
    CreateIssueAction,
    CreatePullRequestAction,
    CreateRepoAction,
    DeleteBranchAction,
    DeleteTagAction,
    MergePullRequestAction,
    MirrorSyncCreateAction,
    MirrorSyncDeleteAction,
    MirrorSyncPushAction,
    OpType,
    PublishReleaseAction,
    PullReviewDismissedAction,
    PushTagAction,
    RejectPullRequestAction,
    RenameRepoAction,
    ReopenIssueAction,
    ReopenPullRequestAction,
    Repository,
    StarRepoAction,
    TransferRepoAction,
    UnknownAction,
    User,
    WatchRepoAction,
)

BRANCH_PREFIX = "refs/heads/"
TAG_PREFIX = "refs/tags/"

# Stored comment link meaning "no link yet".
_NO_LINK = "#"


def short_ref_name(ref_name: str) -> str:
    """Strip the refs/heads/ or refs/tags/ prefix from a full ref name."""
    for prefix in (BRANCH_PREFIX, TAG_PREFIX):
        if ref_name.startswith(prefix):
            return ref_name[len(prefix):]
    return ref_name


def issue_infos(content: str) -> list[str]:
    """Split issue action content ("index|title|extra") into at most three parts."""
    return content.split("|", 2)


def parse_created(value: Any) -> datetime:
    """Parse an activity timestamp into a timezone-aware datetime.

    Accepts datetimes, Unix timestamps and date strings. Naive values are
    taken as UTC.

    Raises:
        ActionDecodeError: If the value cannot be parsed
    """
    if isinstance(value, datetime):
        created = value
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        created = datetime.fromtimestamp(value, UTC)
    elif isinstance(value, str) and value.strip():
        text = value.strip()
        if text.lstrip("-").isdigit():
            created = datetime.fromtimestamp(int(text), UTC)
        else:
            try:
                created = date_parser.parse(text)
            except (ValueError, OverflowError) as e:
                raise ActionDecodeError(f"Invalid created timestamp {value!r}: {e}") from e
    else:
        raise ActionDecodeError(f"Invalid created timestamp {value!r}")

    if created.tzinfo is None:
        created = created.replace(tzinfo=UTC)
    return created


def _info(infos: list[str], position: int) -> str:
    return infos[position] if len(infos) > position else ""


def _comment_link(row: dict[str, Any]) -> str | None:
    link = row.get("comment_link") or ""
    if not link or link == _NO_LINK:
        return None
    return link


def _index_and_text(content: str) -> tuple[str, str]:
    """Split "index|text" at the first "|"; the text may itself contain "|"."""
    index, _, text = content.partition("|")
    return index, text


def _issue_fields(row, content):
    index, title = _index_and_text(content)
    return {"issue_index": index, "issue_title": row.get("issue_title") or title}


def _decode_variant(op_type: OpType, row: dict[str, Any]) -> tuple[type[Action], dict[str, Any]]:
    """Return the action class and its variant fields for an op code."""
    content = row.get("content") or ""
    ref_name = short_ref_name(row.get("ref_name") or "")
    comment_link = _comment_link(row)

    if op_type == OpType.CREATE_REPO:
        return CreateRepoAction, {}
    if op_type == OpType.RENAME_REPO:
        return RenameRepoAction, {"old_name": content}
    if op_type == OpType.TRANSFER_REPO:
        return TransferRepoAction, {"old_path": content}
    if op_type == OpType.STAR_REPO:
        return StarRepoAction, {}
    if op_type == OpType.WATCH_REPO:
        return WatchRepoAction, {}
    if op_type == OpType.COMMIT_REPO:
        return CommitRepoAction, {"ref_name": ref_name, "content": content}
    if op_type == OpType.PUSH_TAG:
        return PushTagAction, {"tag_name": ref_name}
    if op_type == OpType.DELETE_TAG:
        return DeleteTagAction, {"tag_name": ref_name}
    if op_type == OpType.DELETE_BRANCH:
        return DeleteBranchAction, {"ref_name": ref_name}
    if op_type == OpType.MIRROR_SYNC_PUSH:
        return MirrorSyncPushAction, {
            "ref_name": ref_name,
            "content": content,
            "comment_link": comment_link,
        }
    if op_type == OpType.MIRROR_SYNC_CREATE:
        return MirrorSyncCreateAction, {"ref_name": ref_name, "comment_link": comment_link}
    if op_type == OpType.MIRROR_SYNC_DELETE:
        return MirrorSyncDeleteAction, {"ref_name": ref_name}
    if op_type == OpType.PUBLISH_RELEASE:
        return PublishReleaseAction, {
            "tag_name": ref_name,
            "release_title": content,
            "comment_link": comment_link,
        }

    infos = issue_infos(content)

    if op_type in (OpType.CREATE_ISSUE, OpType.CREATE_PULL_REQUEST):
        cls = CreateIssueAction if op_type == OpType.CREATE_ISSUE else CreatePullRequestAction
        return cls, {**_issue_fields(row, content), "body": row.get("issue_content") or ""}

    comment_classes = {
        OpType.COMMENT_ISSUE: CommentIssueAction,
        OpType.APPROVE_PULL_REQUEST: ApprovePullRequestAction,
        OpType.REJECT_PULL_REQUEST: RejectPullRequestAction,
        OpType.COMMENT_PULL: CommentPullAction,
    }
    if op_type in comment_classes:
        index, text = _index_and_text(content)
        return comment_classes[op_type], {
            "issue_index": index,
            "issue_title": row.get("issue_title") or "",
            "comment": text,
            "comment_link": comment_link,
        }

    state_classes = {
        OpType.CLOSE_ISSUE: CloseIssueAction,
        OpType.REOPEN_ISSUE: ReopenIssueAction,
        OpType.CLOSE_PULL_REQUEST: ClosePullRequestAction,
        OpType.REOPEN_PULL_REQUEST: ReopenPullRequestAction,
    }
    if op_type in state_classes:
        return state_classes[op_type], {
            **_issue_fields(row, content),
            "comment_link": comment_link,
        }

    if op_type == OpType.MERGE_PULL_REQUEST:
        return MergePullRequestAction, {
            "issue_index": _info(infos, 0),
            "merge_reference": _info(infos, 1),
            "comment_link": comment_link,
        }
    if op_type == OpType.PULL_REVIEW_DISMISSED:
        return PullReviewDismissedAction, {
            "issue_index": _info(infos, 0),
            "reviewer": _info(infos, 1),
            "reason": _info(infos, 2),
            "comment_link": comment_link,
        }

    return UnknownAction, {"raw_op_type": int(op_type)}


def action_from_dict(row: dict[str, Any]) -> Action:
    """Decode one raw activity row into a typed action.

    Args:
        row: Mapping with id, op_type, act_user, repo, created and the
            optional ref_name, content, comment_link, issue_title and
            issue_content keys

    Returns:
        The matching Action subclass; UnknownAction for op codes without
        a feed representation

    Raises:
        ActionDecodeError: If a required key is missing or malformed
    """
    try:
        action_id = int(row["id"])
        raw_op_type = row["op_type"]
        user_data = row["act_user"]
        repo_data = row["repo"]
        created = parse_created(row["created"])
        actor = User(
            name=user_data["name"],
            full_name=user_data.get("full_name") or "",
            email=user_data.get("email") or "",
        )
        repo = Repository(owner_name=repo_data["owner_name"], name=repo_data["name"])
    except KeyError as e:
        raise ActionDecodeError(f"Activity row is missing {e.args[0]!r}") from e
    except (TypeError, ValueError) as e:
        raise ActionDecodeError(f"Malformed activity row: {e}") from e

    common = {"id": action_id, "actor": actor, "repo": repo, "created": created}

    try:
        op_type = OpType(int(raw_op_type))
    except (TypeError, ValueError):
        return UnknownAction(**common, raw_op_type=raw_op_type)

    cls, fields = _decode_variant(op_type, row)
    return cls(**common, **fields)


def actions_from_rows(rows: list[dict[str, Any]], execution_id: str | None = None) -> list[Action]:
    """Decode raw activity rows, keeping their order."""
    logger = create_execution_logger("loader", execution_id)
    actions = [action_from_dict(row) for row in rows]
    unknown = sum(1 for action in actions if isinstance(action, UnknownAction))
    logger.debug(
        f"Decoded {len(actions)} activity rows",
        rows_count=len(actions),
        unknown_count=unknown,
    )
    return actions
