"""Expansion of push action payloads into commit lists."""

import json

from .errors import ActionDecodeError
from .models import PushCommit, PushCommits


class PushPayloadExpander:
    """Decodes the JSON push payload stored in push actions.

    The payload looks like::

        {"Commits": [{"Sha1": "...", "Message": "..."}],
         "Len": 2, "CompareURL": "owner/repo/compare/a...b"}
    """

    def expand(self, action) -> PushCommits:
        """Return the commits carried by a commit push or mirror push action.

        Raises:
            ActionDecodeError: If the payload is not valid JSON or has
                fields of the wrong type
        """
        content = getattr(action, "content", "")
        if not content:
            return PushCommits()

        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise ActionDecodeError(
                f"Invalid push payload for action {action.id}: {e}"
            ) from e

        if not isinstance(data, dict):
            raise ActionDecodeError(f"Push payload for action {action.id} is not an object")

        entries = data.get("Commits") or []
        if not isinstance(entries, list):
            raise ActionDecodeError(f"Push payload for action {action.id} has invalid Commits")

        commits = []
        for entry in entries:
            if not isinstance(entry, dict):
                raise ActionDecodeError(
                    f"Push payload for action {action.id} has a non-object commit: {entry!r}"
                )
            sha = entry.get("Sha1") or ""
            message = entry.get("Message") or ""
            if not isinstance(sha, str) or not isinstance(message, str):
                raise ActionDecodeError(
                    f"Push payload for action {action.id} has a malformed commit: {entry!r}"
                )
            commits.append(PushCommit(sha=sha, message=message))

        count = data.get("Len")
        if count is None:
            count = len(commits)
        elif isinstance(count, bool) or not isinstance(count, int):
            raise ActionDecodeError(
                f"Push payload for action {action.id} has invalid Len {count!r}"
            )

        compare_url = data.get("CompareURL") or ""
        if not isinstance(compare_url, str):
            raise ActionDecodeError(
                f"Push payload for action {action.id} has invalid CompareURL {compare_url!r}"
            )

        return PushCommits(commits=commits, count=count, compare_url=compare_url)
