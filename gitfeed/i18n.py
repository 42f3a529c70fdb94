"""Message catalog and translator for feed item titles."""

import html

from .logging_config import create_execution_logger

# Built-in English catalog. Placeholders are positional str.format fields.
DEFAULT_MESSAGES = {
    "action.create_repo": 'created repository <a href="{0}">{1}</a>',
    "action.rename_repo": 'renamed repository from <code>{0}</code> to <a href="{1}">{2}</a>',
    "action.transfer_repo": 'transferred repository <code>{0}</code> to <a href="{1}">{2}</a>',
    "action.commit_repo": 'pushed to <a href="{1}">{2}</a> at <a href="{0}">{3}</a>',
    "action.create_branch": 'created branch <a href="{1}">{2}</a> in <a href="{0}">{3}</a>',
    "action.create_issue": 'opened issue <a href="{0}">{2}#{1}</a>',
    "action.create_pull_request": 'created pull request <a href="{0}">{2}#{1}</a>',
    "action.comment_issue": 'commented on issue <a href="{0}">{2}#{1}</a>',
    "action.comment_pull": 'commented on pull request <a href="{0}">{2}#{1}</a>',
    "action.merge_pull_request": 'merged pull request <a href="{0}">{2}#{1}</a>',
    "action.close_issue": 'closed issue <a href="{0}">{2}#{1}</a>',
    "action.reopen_issue": 'reopened issue <a href="{0}">{2}#{1}</a>',
    "action.close_pull_request": 'closed pull request <a href="{0}">{2}#{1}</a>',
    "action.reopen_pull_request": 'reopened pull request <a href="{0}">{2}#{1}</a>',
    "action.push_tag": 'pushed tag <a href="{1}">{2}</a> to <a href="{0}">{3}</a>',
    "action.delete_tag": 'deleted tag {1} from <a href="{0}">{2}</a>',
    "action.delete_branch": 'deleted branch {1} from <a href="{0}">{2}</a>',
    "action.mirror_sync_push": 'synced commits to <a href="{1}">{2}</a> at <a href="{0}">{3}</a> from mirror',
    "action.mirror_sync_create": 'synced new reference <a href="{1}">{2}</a> to <a href="{0}">{3}</a> from mirror',
    "action.mirror_sync_delete": 'synced and deleted reference <code>{1}</code> at <a href="{0}">{2}</a> from mirror',
    "action.approve_pull_request": 'approved <a href="{0}">{2}#{1}</a>',
    "action.reject_pull_request": 'suggested changes for <a href="{0}">{2}#{1}</a>',
    "action.publish_release": 'released <a href="{1}">"{3}"</a> at <a href="{0}">{2}</a>',
    "action.review_dismissed": 'dismissed review from <b>{3}</b> for <a href="{0}">{2}#{1}</a>',
    "action.review_dismissed_reason": "Reason:",
    "action.starred_repo": 'starred <a href="{0}">{1}</a>',
    "action.watched_repo": 'started watching <a href="{0}">{1}</a>',
}


class Translator:
    """Turns message keys and arguments into HTML-safe localized strings."""

    def __init__(self, messages: dict[str, str] | None = None, execution_id: str | None = None):
        """Initialize the translator.

        Args:
            messages: Catalog overriding the built-in English messages
            execution_id: Execution ID for logging context
        """
        self.messages = dict(DEFAULT_MESSAGES)
        if messages:
            self.messages.update(messages)
        self.logger = create_execution_logger("translator", execution_id)

    def localize(self, key: str, *args) -> str:
        """Format the message for key with every argument HTML-escaped."""
        escaped = [html.escape(str(arg)) for arg in args]
        template = self._template(key)
        try:
            return template.format(*escaped)
        except (IndexError, KeyError, ValueError) as e:
            self.logger.warning(
                f"Malformed message template for {key}: {e}", error=str(e)
            )
            return html.escape(key)

    def localize_plain(self, key: str) -> str:
        """Return a fixed phrase that takes no arguments."""
        return self._template(key)

    def _template(self, key: str) -> str:
        template = self.messages.get(key)
        if template is None:
            self.logger.warning(f"Missing translation for {key}")
            return html.escape(key)
        return template
