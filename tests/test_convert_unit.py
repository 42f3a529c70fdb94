"""Unit tests for the activity to feed item converter."""

import json
from datetime import UTC, datetime
from unittest.mock import Mock

import pytest

from gitfeed.convert import FeedItemConverter
from gitfeed.errors import RenderError, UnknownActionTypeError
from gitfeed.models import (
    ApprovePullRequestAction,
    Author,
    CloseIssueAction,
    CommentIssueAction,
    CommentPullAction,
    CommitRepoAction,
    CreateIssueAction,
    CreatePullRequestAction,
    CreateRepoAction,
    DeleteBranchAction,
    FeedItem,
    MergePullRequestAction,
    MirrorSyncCreateAction,
    MirrorSyncDeleteAction,
    MirrorSyncPushAction,
    OpType,
    PublishReleaseAction,
    PullReviewDismissedAction,
    PushTagAction,
    RenameRepoAction,
    Repository,
    StarRepoAction,
    UnknownAction,
    User,
    WatchRepoAction,
)

CREATED = datetime(2024, 1, 1, 10, 0, tzinfo=UTC)
ALICE = User(name="alice", full_name="Alice Doe", email="alice@example.com")
REPO = Repository(owner_name="gitea", name="tea")
REPO_URL = "/gitea/tea"


def common(action_id: int = 1) -> dict:
    return {"id": action_id, "actor": ALICE, "repo": REPO, "created": CREATED}


def push_payload(*commits, compare_url="gitea/tea/compare/aaa...bbb") -> str:
    return json.dumps(
        {
            "Commits": [{"Sha1": sha, "Message": message} for sha, message in commits],
            "Len": len(commits),
            "CompareURL": compare_url,
        }
    )


class TestFeedItemConverterUnit:
    """Unit tests for FeedItemConverter."""

    def test_create_repo_item(self):
        converter = FeedItemConverter()

        [item] = converter.convert([CreateRepoAction(**common(42))])

        assert item == FeedItem(
            id="42",
            title='Alice Doe created repository <a href="/gitea/tea">gitea/tea</a>',
            link=REPO_URL,
            description="",
            content="",
            author=Author(name="Alice Doe", email="alice@example.com"),
            created=CREATED,
        )

    def test_actor_without_full_name_uses_login(self):
        converter = FeedItemConverter()
        bob = User(name="bob", full_name="  ")

        [item] = converter.convert(
            [StarRepoAction(id=1, actor=bob, repo=REPO, created=CREATED)]
        )

        assert item.title == 'bob starred <a href="/gitea/tea">gitea/tea</a>'
        assert item.author == Author(name="bob", email="")

    def test_app_sub_url_prefixes_links(self):
        converter = FeedItemConverter(app_sub_url="/git/")

        [item] = converter.convert([WatchRepoAction(**common())])

        assert item.link == "/git/gitea/tea"
        assert 'href="/git/gitea/tea"' in item.title

    def test_output_keeps_input_order(self):
        converter = FeedItemConverter()
        actions = [
            StarRepoAction(**common(3)),
            CreateRepoAction(**common(1)),
            WatchRepoAction(**common(2)),
        ]

        items = converter.convert(actions)

        assert [item.id for item in items] == ["3", "1", "2"]

    def test_unknown_action_aborts_whole_batch(self):
        converter = FeedItemConverter()
        actions = [
            CreateRepoAction(**common(1)),
            UnknownAction(**common(2), raw_op_type=OpType.AUTO_MERGE_PULL_REQUEST),
            StarRepoAction(**common(3)),
        ]

        with pytest.raises(UnknownActionTypeError) as excinfo:
            converter.convert(actions)

        assert excinfo.value.op_type == OpType.AUTO_MERGE_PULL_REQUEST
        assert "unknown action type" in str(excinfo.value)

    def test_rename_repo_escapes_arguments_once(self):
        converter = FeedItemConverter()

        [item] = converter.convert([RenameRepoAction(**common(), old_name="<old>")])

        assert item.title == (
            "Alice Doe renamed repository from <code>&lt;old&gt;</code> "
            'to <a href="/gitea/tea">gitea/tea</a>'
        )
        assert item.link == REPO_URL


class TestPushConversionUnit:
    """Commit flattening for push actions."""

    def test_push_without_commits_is_branch_creation(self):
        converter = FeedItemConverter()

        [item] = converter.convert([CommitRepoAction(**common(), ref_name="main")])

        assert item.link == "/gitea/tea/src/branch/main"
        assert item.title == (
            'Alice Doe created branch <a href="/gitea/tea/src/branch/main">main</a> '
            'in <a href="/gitea/tea">gitea/tea</a>'
        )
        assert item.description == ""
        assert item.content == ""

    def test_push_with_zero_commits_keeps_branch_link(self):
        converter = FeedItemConverter()
        action = CommitRepoAction(**common(), ref_name="main", content=push_payload())

        [item] = converter.convert([action])

        assert item.link == "/gitea/tea/src/branch/main"
        assert item.description == ""
        assert item.title.startswith("Alice Doe pushed to ")

    def test_push_with_one_commit_links_commit(self):
        converter = FeedItemConverter()
        action = CommitRepoAction(
            **common(), ref_name="main", content=push_payload(("abc123", "Fix <bug>\n\nDetails"))
        )

        [item] = converter.convert([action])

        assert item.link == "/gitea/tea/commit/abc123"
        assert item.description == '<a href="/gitea/tea/commit/abc123">abc123</a>\nFix &lt;bug&gt;'
        assert item.content == item.description

    def test_push_with_many_commits_links_compare(self):
        converter = FeedItemConverter(app_sub_url="/git")
        action = CommitRepoAction(
            **common(),
            ref_name="main",
            content=push_payload(("aaa", "First"), ("bbb", "Second"), ("ccc", "Third")),
        )

        [item] = converter.convert([action])

        assert item.link == "/git/gitea/tea/compare/aaa...bbb"
        assert item.description == (
            '<a href="/git/gitea/tea/commit/aaa">aaa</a>\nFirst\n\n'
            '<a href="/git/gitea/tea/commit/bbb">bbb</a>\nSecond\n\n'
            '<a href="/git/gitea/tea/commit/ccc">ccc</a>\nThird'
        )

    def test_branch_link_escapes_segments(self):
        converter = FeedItemConverter()

        [item] = converter.convert(
            [CommitRepoAction(**common(), ref_name="feature/new thing")]
        )

        assert item.link == "/gitea/tea/src/branch/feature/new%20thing"

    def test_invalid_push_payload_is_ignored(self):
        converter = FeedItemConverter()
        action = CommitRepoAction(**common(), ref_name="main", content="{not json")

        [item] = converter.convert([action])

        assert item.link == "/gitea/tea/src/branch/main"
        assert item.description == ""

    @pytest.mark.parametrize(
        "content", ['{"Len": "x"}', '{"Commits": ["x"]}', '{"Commits": {"Sha1": "a"}}']
    )
    def test_malformed_push_payload_does_not_abort_batch(self, content):
        converter = FeedItemConverter()
        actions = [
            CommitRepoAction(**common(1), ref_name="main", content=content),
            CreateRepoAction(**common(2)),
        ]

        items = converter.convert(actions)

        assert [item.id for item in items] == ["1", "2"]
        assert items[0].link == "/gitea/tea/src/branch/main"
        assert items[0].description == ""

    def test_mirror_push_keeps_preset_link_without_commits(self):
        converter = FeedItemConverter()
        action = MirrorSyncPushAction(
            **common(), ref_name="main", content="", comment_link="/custom"
        )

        [item] = converter.convert([action])

        assert item.link == "/custom"
        assert 'href="/gitea/tea/src/main"' in item.title

    def test_mirror_push_with_commit_overrides_link(self):
        converter = FeedItemConverter()
        action = MirrorSyncPushAction(
            **common(),
            ref_name="main",
            content=push_payload(("abc", "Sync")),
            comment_link="/custom",
        )

        [item] = converter.convert([action])

        assert item.link == "/gitea/tea/commit/abc"

    def test_uses_injected_expander(self):
        expander = Mock()
        expander.expand.return_value.commits = []
        expander.expand.return_value.count = 0
        converter = FeedItemConverter(expander=expander)
        action = CommitRepoAction(**common(), ref_name="main", content="payload")

        converter.convert([action])

        expander.expand.assert_called_once_with(action)


class TestLinkDerivationUnit:
    """Derived and preset links per action category."""

    @pytest.mark.parametrize(
        "action, expected_link",
        [
            (PushTagAction(**common(), tag_name="v1.0"), "/gitea/tea/src/tag/v1.0"),
            (DeleteBranchAction(**common(), ref_name="old"), REPO_URL),
            (MirrorSyncCreateAction(**common(), ref_name="v2"), "/gitea/tea/src/v2"),
            (MirrorSyncDeleteAction(**common(), ref_name="v2"), REPO_URL),
            (PublishReleaseAction(**common(), tag_name="v1.0"), "/gitea/tea/releases/tag/v1.0"),
            (CreateIssueAction(**common(), issue_index="5"), "/gitea/tea/issues/5"),
            (CreatePullRequestAction(**common(), issue_index="6"), "/gitea/tea/pulls/6"),
            (CloseIssueAction(**common(), issue_index="5"), "/gitea/tea/issues/5"),
            (MergePullRequestAction(**common(), issue_index="6"), "/gitea/tea/pulls/6"),
            (ApprovePullRequestAction(**common(), issue_index="6"), "/gitea/tea/pulls/6"),
            (CommentPullAction(**common(), issue_index="6"), "/gitea/tea/pulls/6"),
            (PullReviewDismissedAction(**common(), issue_index="6"), "/gitea/tea/pulls/6"),
        ],
    )
    def test_derived_link(self, action, expected_link):
        [item] = FeedItemConverter().convert([action])

        assert item.link == expected_link

    @pytest.mark.parametrize(
        "action",
        [
            CommentIssueAction(**common(), issue_index="5", comment_link="/c/1"),
            CloseIssueAction(**common(), issue_index="5", comment_link="/c/1"),
            MergePullRequestAction(**common(), issue_index="6", comment_link="/c/1"),
            ApprovePullRequestAction(**common(), issue_index="6", comment_link="/c/1"),
            MirrorSyncCreateAction(**common(), ref_name="v2", comment_link="/c/1"),
            PublishReleaseAction(**common(), tag_name="v1", comment_link="/c/1"),
        ],
    )
    def test_preset_link_is_kept(self, action):
        [item] = FeedItemConverter().convert([action])

        assert item.link == "/c/1"

    def test_title_uses_derived_link_when_link_is_preset(self):
        translator = Mock()
        translator.localize.return_value = "commented"
        converter = FeedItemConverter(translator=translator)
        action = CommentIssueAction(**common(), issue_index="5", comment_link="/c/1")

        [item] = converter.convert([action])

        translator.localize.assert_called_once_with(
            "action.comment_issue", "/gitea/tea/issues/5", "5", "gitea/tea"
        )
        assert item.title == "Alice Doe commented"

    def test_release_title_arguments(self):
        translator = Mock()
        translator.localize.return_value = "released"
        converter = FeedItemConverter(translator=translator)
        action = PublishReleaseAction(**common(), tag_name="v1.0", release_title="First")

        converter.convert([action])

        translator.localize.assert_called_once_with(
            "action.publish_release",
            REPO_URL,
            "/gitea/tea/releases/tag/v1.0",
            "gitea/tea",
            "First",
        )


class TestDescriptionUnit:
    """Description and content composition."""

    def test_create_issue_renders_body(self):
        converter = FeedItemConverter()
        action = CreateIssueAction(
            **common(), issue_index="5", issue_title="Crash", body="See #4\n\nThanks"
        )

        [item] = converter.convert([action])

        assert item.description == "5#Crash"
        assert item.content == (
            '<p>See <a href="/gitea/tea/issues/4">#4</a></p>\n<p>Thanks</p>'
        )

    def test_create_issue_render_failure_uses_raw_body(self):
        renderer = Mock()
        renderer.render.side_effect = RenderError("boom")
        converter = FeedItemConverter(renderer=renderer)
        action = CreatePullRequestAction(
            **common(), issue_index="6", issue_title="Feature", body="**raw** body"
        )

        [item] = converter.convert([action])

        assert item.description == "6#Feature"
        assert item.content == "**raw** body"

    def test_create_issue_without_body_falls_back_to_description(self):
        converter = FeedItemConverter()
        action = CreateIssueAction(**common(), issue_index="5", issue_title="Crash")

        [item] = converter.convert([action])

        assert item.content == "5#Crash"

    def test_comment_appends_rendered_comment(self):
        converter = FeedItemConverter()
        action = CommentIssueAction(
            **common(), issue_index="5", issue_title="Crash", comment="Me too"
        )

        [item] = converter.convert([action])

        assert item.description == "Crash\n\n<p>Me too</p>"
        assert item.content == item.description

    def test_comment_without_text_is_title_only(self):
        converter = FeedItemConverter()
        action = ApprovePullRequestAction(**common(), issue_index="6", issue_title="Feature")

        [item] = converter.convert([action])

        assert item.description == "Feature"

    def test_comment_render_failure_uses_raw_comment(self):
        renderer = Mock()
        renderer.render.side_effect = ValueError("bad markup")
        converter = FeedItemConverter(renderer=renderer)
        action = CommentPullAction(
            **common(), issue_index="6", issue_title="Feature", comment="_lgtm_"
        )

        [item] = converter.convert([action])

        assert item.description == "Feature\n\n_lgtm_"

    def test_renderer_receives_repository_context(self):
        renderer = Mock()
        renderer.render.return_value = "<p>x</p>"
        converter = FeedItemConverter(renderer=renderer)
        action = CommentIssueAction(**common(), issue_index="5", comment="x")

        converter.convert([action])

        text, ctx = renderer.render.call_args.args
        assert text == "x"
        assert ctx.url_prefix == REPO_URL
        assert ctx.owner_name == "gitea"
        assert ctx.repo_name == "tea"

    def test_merge_description_is_merge_reference(self):
        converter = FeedItemConverter()
        action = MergePullRequestAction(
            **common(), issue_index="6", merge_reference="Add <feature>"
        )

        [item] = converter.convert([action])

        assert item.description == "Add <feature>"
        assert item.content == "Add <feature>"

    def test_close_issue_description_is_title(self):
        converter = FeedItemConverter()
        action = CloseIssueAction(**common(), issue_index="5", issue_title="Crash")

        [item] = converter.convert([action])

        assert item.description == "Crash"
        assert item.title == (
            'Alice Doe closed issue <a href="/gitea/tea/issues/5">gitea/tea#5</a>'
        )

    def test_review_dismissed_description(self):
        converter = FeedItemConverter()
        action = PullReviewDismissedAction(
            **common(), issue_index="6", reviewer="bob", reason="outdated"
        )

        [item] = converter.convert([action])

        assert item.description == "Reason:\n\noutdated"
        assert item.title == (
            "Alice Doe dismissed review from <b>bob</b> for "
            '<a href="/gitea/tea/pulls/6">gitea/tea#6</a>'
        )

    @pytest.mark.parametrize(
        "action",
        [
            CreateRepoAction(**common()),
            RenameRepoAction(**common(), old_name="old"),
            StarRepoAction(**common()),
            WatchRepoAction(**common()),
            PushTagAction(**common(), tag_name="v1"),
        ],
    )
    def test_title_only_actions_have_no_description(self, action):
        [item] = FeedItemConverter().convert([action])

        assert item.description == ""
        assert item.content == ""
