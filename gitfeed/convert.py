"""Conversion of repository activity into syndication feed items."""

import html

from . import links
from .commits import PushPayloadExpander
from .config import Config
from .errors import ActionDecodeError, UnknownActionTypeError
from .i18n import Translator
from .logging_config import create_execution_logger
from .models import (
    Action,
    ApprovePullRequestAction,
    Author,
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
    FeedItem,
    MergePullRequestAction,
    MirrorSyncCreateAction,
    MirrorSyncDeleteAction,
    MirrorSyncPushAction,
    PublishReleaseAction,
    PullReviewDismissedAction,
    PushTagAction,
    RejectPullRequestAction,
    RenameRepoAction,
    ReopenIssueAction,
    ReopenPullRequestAction,
    StarRepoAction,
    TransferRepoAction,
    WatchRepoAction,
)
from .render import PlainTextRenderer, RenderContext, SanitizingRenderer, render_commit_message

# Each title rule returns (message key, message arguments, item link).
# Rules reading comment_link keep a pre-set link and derive one only when
# it is missing.


def _create_repo(act, repo_url):
    return "action.create_repo", (repo_url, act.repo.short_path), repo_url


def _rename_repo(act, repo_url):
    return "action.rename_repo", (act.old_name, repo_url, act.repo.short_path), repo_url


def _transfer_repo(act, repo_url):
    return "action.transfer_repo", (act.old_path, repo_url, act.repo.short_path), repo_url


def _commit_repo(act, repo_url):
    branch_url = links.branch_link(repo_url, act.ref_name)
    key = "action.commit_repo" if act.content else "action.create_branch"
    return key, (repo_url, branch_url, act.ref_name, act.repo.short_path), branch_url


def _push_tag(act, repo_url):
    tag_url = links.tag_link(repo_url, act.tag_name)
    return "action.push_tag", (repo_url, tag_url, act.tag_name, act.repo.short_path), tag_url


def _delete_tag(act, repo_url):
    return "action.delete_tag", (repo_url, act.tag_name, act.repo.short_path), repo_url


def _delete_branch(act, repo_url):
    return "action.delete_branch", (repo_url, act.ref_name, act.repo.short_path), repo_url


def _issue_rule(key, fill):
    def rule(act, repo_url):
        issue_url = links.issue_link(repo_url, act.issue_index)
        link = (act.comment_link or issue_url) if fill else issue_url
        return key, (issue_url, act.issue_index, act.repo.short_path), link

    return rule


def _pull_rule(key, fill):
    def rule(act, repo_url):
        pull_url = links.pull_link(repo_url, act.issue_index)
        link = (act.comment_link or pull_url) if fill else pull_url
        return key, (pull_url, act.issue_index, act.repo.short_path), link

    return rule


def _review_dismissed(act, repo_url):
    pull_url = links.pull_link(repo_url, act.issue_index)
    args = (pull_url, act.issue_index, act.repo.short_path, act.reviewer)
    return "action.review_dismissed", args, act.comment_link or pull_url


def _mirror_sync_rule(key):
    def rule(act, repo_url):
        src_url = links.src_link(repo_url, act.ref_name)
        args = (repo_url, src_url, act.ref_name, act.repo.short_path)
        return key, args, act.comment_link or src_url

    return rule


def _mirror_sync_delete(act, repo_url):
    return "action.mirror_sync_delete", (repo_url, act.ref_name, act.repo.short_path), repo_url


def _publish_release(act, repo_url):
    release_url = links.release_link(repo_url, act.tag_name)
    args = (repo_url, release_url, act.repo.short_path, act.release_title)
    return "action.publish_release", args, act.comment_link or release_url


def _starred_repo(act, repo_url):
    return "action.starred_repo", (repo_url, act.repo.path), repo_url


def _watched_repo(act, repo_url):
    return "action.watched_repo", (repo_url, act.repo.path), repo_url


TITLE_RULES = {
    CreateRepoAction: _create_repo,
    RenameRepoAction: _rename_repo,
    TransferRepoAction: _transfer_repo,
    CommitRepoAction: _commit_repo,
    PushTagAction: _push_tag,
    DeleteTagAction: _delete_tag,
    DeleteBranchAction: _delete_branch,
    CreateIssueAction: _issue_rule("action.create_issue", fill=False),
    CommentIssueAction: _issue_rule("action.comment_issue", fill=True),
    CloseIssueAction: _issue_rule("action.close_issue", fill=True),
    ReopenIssueAction: _issue_rule("action.reopen_issue", fill=True),
    CreatePullRequestAction: _pull_rule("action.create_pull_request", fill=False),
    MergePullRequestAction: _pull_rule("action.merge_pull_request", fill=True),
    ClosePullRequestAction: _pull_rule("action.close_pull_request", fill=True),
    ReopenPullRequestAction: _pull_rule("action.reopen_pull_request", fill=True),
    ApprovePullRequestAction: _pull_rule("action.approve_pull_request", fill=True),
    RejectPullRequestAction: _pull_rule("action.reject_pull_request", fill=True),
    CommentPullAction: _pull_rule("action.comment_pull", fill=True),
    PullReviewDismissedAction: _review_dismissed,
    MirrorSyncPushAction: _mirror_sync_rule("action.mirror_sync_push"),
    MirrorSyncCreateAction: _mirror_sync_rule("action.mirror_sync_create"),
    MirrorSyncDeleteAction: _mirror_sync_delete,
    PublishReleaseAction: _publish_release,
    StarRepoAction: _starred_repo,
    WatchRepoAction: _watched_repo,
}

_PUSH_ACTIONS = (CommitRepoAction, MirrorSyncPushAction)
_CREATE_ACTIONS = (CreateIssueAction, CreatePullRequestAction)
_COMMENT_ACTIONS = (
    CommentIssueAction,
    ApprovePullRequestAction,
    RejectPullRequestAction,
    CommentPullAction,
)
_STATE_ACTIONS = (
    CloseIssueAction,
    ReopenIssueAction,
    ClosePullRequestAction,
    ReopenPullRequestAction,
)


class FeedItemConverter:
    """Turns activity actions into feed items."""

    def __init__(
        self,
        app_sub_url: str = "",
        translator: Translator | None = None,
        renderer=None,
        expander=None,
        execution_id: str | None = None,
    ):
        """Initialize the converter.

        Args:
            app_sub_url: Path prefix of the web application, e.g. "/git"
            translator: Localizes title and description phrases
            renderer: Renders issue bodies and comments to HTML
            expander: Expands push payloads into commit lists
            execution_id: Execution ID for logging context
        """
        self.app_sub_url = app_sub_url.rstrip("/")
        self.translator = translator or Translator(execution_id=execution_id)
        self.renderer = renderer or SanitizingRenderer(PlainTextRenderer())
        self.expander = expander or PushPayloadExpander()
        self.logger = create_execution_logger("converter", execution_id)

    @classmethod
    def from_config(cls, config: Config, execution_id: str | None = None) -> "FeedItemConverter":
        """Build a converter with the default collaborators for a Config."""
        translator = Translator(config.load_messages(), execution_id=execution_id)
        return cls(
            app_sub_url=config.app_sub_url,
            translator=translator,
            execution_id=execution_id,
        )

    def convert(self, actions: list[Action]) -> list[FeedItem]:
        """Convert actions into feed items, keeping their order.

        Args:
            actions: Actions in chronological order

        Returns:
            One FeedItem per action

        Raises:
            UnknownActionTypeError: If any action has no feed representation;
                no items are returned in that case
        """
        items = [self.to_feed_item(action) for action in actions]
        self.logger.debug(f"Converted {len(items)} actions", items_count=len(items))
        return items

    def to_feed_item(self, act: Action) -> FeedItem:
        """Convert a single action into a feed item."""
        rule = TITLE_RULES.get(type(act))
        if rule is None:
            self.logger.log_item_processing(act.id, act.op_type, success=False)
            raise UnknownActionTypeError(act.op_type)

        repo_url = links.repo_link(self.app_sub_url, act.repo)
        key, args, link = rule(act, repo_url)
        title = f"{act.actor.display_name} {self.translator.localize(key, *args)}"

        description, content, link = self._describe(act, repo_url, link)
        if not content:
            content = description

        self.logger.log_item_processing(act.id, act.op_type)
        return FeedItem(
            id=str(act.id),
            title=title,
            link=link,
            description=description,
            content=content,
            author=Author(name=act.actor.display_name, email=act.actor.email),
            created=act.created,
        )

    def _describe(self, act: Action, repo_url: str, link: str) -> tuple[str, str, str]:
        """Return (description, content, link) for an action."""
        description = ""
        content = ""

        if isinstance(act, _PUSH_ACTIONS):
            description, link = self._describe_push(act, repo_url, link)
        elif isinstance(act, _CREATE_ACTIONS):
            description = f"{act.issue_index}#{act.issue_title}"
            content = self._render(act, repo_url, act.body)
        elif isinstance(act, _COMMENT_ACTIONS):
            description = act.issue_title
            if act.comment:
                description += "\n\n" + self._render(act, repo_url, act.comment)
        elif isinstance(act, MergePullRequestAction):
            description = act.merge_reference
        elif isinstance(act, _STATE_ACTIONS):
            description = act.issue_title
        elif isinstance(act, PullReviewDismissedAction):
            reason_label = self.translator.localize_plain("action.review_dismissed_reason")
            description = f"{reason_label}\n\n{act.reason}"

        return description, content, link

    def _describe_push(self, act: Action, repo_url: str, link: str) -> tuple[str, str]:
        try:
            push = self.expander.expand(act)
        except ActionDecodeError as e:
            self.logger.warning(
                f"Ignoring push payload of action {act.id}: {e}",
                action_id=act.id,
                error=str(e),
            )
            return "", link

        entries = [
            '<a href="{}">{}</a>\n{}'.format(
                html.escape(links.commit_link(repo_url, commit.sha)),
                commit.sha,
                render_commit_message(commit.message),
            )
            for commit in push.commits
        ]

        if push.count > 1:
            link = links.compare_link(self.app_sub_url, push.compare_url)
        elif push.count == 1 and push.commits:
            link = links.commit_link(repo_url, push.commits[0].sha)

        return "\n\n".join(entries), link

    def _render(self, act: Action, repo_url: str, text: str) -> str:
        """Render text to HTML, falling back to the raw text on failure."""
        ctx = RenderContext(
            url_prefix=repo_url,
            owner_name=act.repo.owner_name,
            repo_name=act.repo.name,
        )
        try:
            return self.renderer.render(text, ctx)
        except Exception as e:
            self.logger.warning(
                f"Failed to render content of action {act.id}: {e}",
                action_id=act.id,
                error=str(e),
            )
            return text
