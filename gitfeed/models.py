"""Data models for gitfeed."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import IntEnum


class OpType(IntEnum):
    """Activity operation codes as stored in the activity log."""

    CREATE_REPO = 1
    RENAME_REPO = 2
    STAR_REPO = 3
    WATCH_REPO = 4
    COMMIT_REPO = 5
    CREATE_ISSUE = 6
    CREATE_PULL_REQUEST = 7
    TRANSFER_REPO = 8
    PUSH_TAG = 9
    COMMENT_ISSUE = 10
    MERGE_PULL_REQUEST = 11
    CLOSE_ISSUE = 12
    REOPEN_ISSUE = 13
    CLOSE_PULL_REQUEST = 14
    REOPEN_PULL_REQUEST = 15
    DELETE_TAG = 16
    DELETE_BRANCH = 17
    MIRROR_SYNC_PUSH = 18
    MIRROR_SYNC_CREATE = 19
    MIRROR_SYNC_DELETE = 20
    APPROVE_PULL_REQUEST = 21
    REJECT_PULL_REQUEST = 22
    COMMENT_PULL = 23
    PUBLISH_RELEASE = 24
    PULL_REVIEW_DISMISSED = 25
    PULL_REQUEST_READY_FOR_REVIEW = 26
    AUTO_MERGE_PULL_REQUEST = 27


def ellipsis(text: str, length: int) -> str:
    """Shorten text to length characters, ending with '...' when cut."""
    if len(text) <= length:
        return text
    if length < 3:
        return text[:length]
    return text[: length - 3] + "..."


@dataclass(frozen=True)
class User:
    """The user who performed an action."""

    name: str
    full_name: str = ""
    email: str = ""

    @property
    def display_name(self) -> str:
        full_name = self.full_name.strip()
        return full_name if full_name else self.name


@dataclass(frozen=True)
class Repository:
    """The repository an action belongs to."""

    owner_name: str
    name: str

    @property
    def path(self) -> str:
        return f"{self.owner_name}/{self.name}"

    @property
    def short_path(self) -> str:
        return f"{ellipsis(self.owner_name, 20)}/{ellipsis(self.name, 33)}"


@dataclass(frozen=True)
class Action:
    """Common fields of every activity record."""

    id: int
    actor: User
    repo: Repository
    created: datetime

    op_type = None


@dataclass(frozen=True)
class CreateRepoAction(Action):
    op_type = OpType.CREATE_REPO


@dataclass(frozen=True)
class RenameRepoAction(Action):
    old_name: str = ""

    op_type = OpType.RENAME_REPO


@dataclass(frozen=True)
class StarRepoAction(Action):
    op_type = OpType.STAR_REPO


@dataclass(frozen=True)
class WatchRepoAction(Action):
    op_type = OpType.WATCH_REPO


@dataclass(frozen=True)
class TransferRepoAction(Action):
    old_path: str = ""

    op_type = OpType.TRANSFER_REPO


@dataclass(frozen=True)
class CommitRepoAction(Action):
    """A push to a branch. Empty content means the branch was just created."""

    ref_name: str = ""
    content: str = ""

    op_type = OpType.COMMIT_REPO


@dataclass(frozen=True)
class PushTagAction(Action):
    tag_name: str = ""

    op_type = OpType.PUSH_TAG


@dataclass(frozen=True)
class DeleteTagAction(Action):
    tag_name: str = ""

    op_type = OpType.DELETE_TAG


@dataclass(frozen=True)
class DeleteBranchAction(Action):
    ref_name: str = ""

    op_type = OpType.DELETE_BRANCH


@dataclass(frozen=True)
class CreateIssueAction(Action):
    issue_index: str = ""
    issue_title: str = ""
    body: str = ""

    op_type = OpType.CREATE_ISSUE


@dataclass(frozen=True)
class CreatePullRequestAction(Action):
    issue_index: str = ""
    issue_title: str = ""
    body: str = ""

    op_type = OpType.CREATE_PULL_REQUEST


@dataclass(frozen=True)
class CommentIssueAction(Action):
    issue_index: str = ""
    issue_title: str = ""
    comment: str = ""
    comment_link: str | None = None

    op_type = OpType.COMMENT_ISSUE


@dataclass(frozen=True)
class ApprovePullRequestAction(Action):
    issue_index: str = ""
    issue_title: str = ""
    comment: str = ""
    comment_link: str | None = None

    op_type = OpType.APPROVE_PULL_REQUEST


@dataclass(frozen=True)
class RejectPullRequestAction(Action):
    issue_index: str = ""
    issue_title: str = ""
    comment: str = ""
    comment_link: str | None = None

    op_type = OpType.REJECT_PULL_REQUEST


@dataclass(frozen=True)
class CommentPullAction(Action):
    issue_index: str = ""
    issue_title: str = ""
    comment: str = ""
    comment_link: str | None = None

    op_type = OpType.COMMENT_PULL


@dataclass(frozen=True)
class MergePullRequestAction(Action):
    issue_index: str = ""
    merge_reference: str = ""
    comment_link: str | None = None

    op_type = OpType.MERGE_PULL_REQUEST


@dataclass(frozen=True)
class CloseIssueAction(Action):
    issue_index: str = ""
    issue_title: str = ""
    comment_link: str | None = None

    op_type = OpType.CLOSE_ISSUE


@dataclass(frozen=True)
class ReopenIssueAction(Action):
    issue_index: str = ""
    issue_title: str = ""
    comment_link: str | None = None

    op_type = OpType.REOPEN_ISSUE


@dataclass(frozen=True)
class ClosePullRequestAction(Action):
    issue_index: str = ""
    issue_title: str = ""
    comment_link: str | None = None

    op_type = OpType.CLOSE_PULL_REQUEST


@dataclass(frozen=True)
class ReopenPullRequestAction(Action):
    issue_index: str = ""
    issue_title: str = ""
    comment_link: str | None = None

    op_type = OpType.REOPEN_PULL_REQUEST


@dataclass(frozen=True)
class PullReviewDismissedAction(Action):
    issue_index: str = ""
    reviewer: str = ""
    reason: str = ""
    comment_link: str | None = None

    op_type = OpType.PULL_REVIEW_DISMISSED


@dataclass(frozen=True)
class MirrorSyncPushAction(Action):
    ref_name: str = ""
    content: str = ""
    comment_link: str | None = None

    op_type = OpType.MIRROR_SYNC_PUSH


@dataclass(frozen=True)
class MirrorSyncCreateAction(Action):
    ref_name: str = ""
    comment_link: str | None = None

    op_type = OpType.MIRROR_SYNC_CREATE


@dataclass(frozen=True)
class MirrorSyncDeleteAction(Action):
    ref_name: str = ""

    op_type = OpType.MIRROR_SYNC_DELETE


@dataclass(frozen=True)
class PublishReleaseAction(Action):
    tag_name: str = ""
    release_title: str = ""
    comment_link: str | None = None

    op_type = OpType.PUBLISH_RELEASE


@dataclass(frozen=True)
class UnknownAction(Action):
    """An activity record whose op code has no feed representation."""

    raw_op_type: int | str = 0

    @property
    def op_type(self) -> int | str:
        return self.raw_op_type


@dataclass(frozen=True)
class PushCommit:
    """A single commit carried by a push action."""

    sha: str
    message: str


@dataclass(frozen=True)
class PushCommits:
    """Commits expanded from a push action payload."""

    commits: list[PushCommit] = field(default_factory=list)
    count: int = 0
    compare_url: str = ""


@dataclass(frozen=True)
class Author:
    name: str
    email: str


@dataclass(frozen=True)
class FeedItem:
    """Represents a single RSS/Atom feed item built from an action."""

    id: str
    title: str
    link: str
    description: str
    content: str
    author: Author
    created: datetime
