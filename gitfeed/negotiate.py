"""Feed format detection from resource names and Accept headers."""

from enum import Enum
from typing import NamedTuple


class FeedType(Enum):
    """Syndication encodings a feed request can ask for."""

    NONE = ""
    RSS = "rss"
    ATOM = "atom"

    @property
    def content_type(self) -> str:
        return _CONTENT_TYPES[self]


_CONTENT_TYPES = {
    FeedType.NONE: "",
    FeedType.RSS: "application/rss+xml",
    FeedType.ATOM: "application/atom+xml",
}

RSS_SUFFIX = ".rss"
ATOM_SUFFIX = ".atom"


class FeedRequest(NamedTuple):
    is_feed: bool
    name: str
    feed_type: FeedType


def detect_feed_type(name: str, accept: str = "") -> FeedRequest:
    """Decide whether a request asks for a feed, and in which encoding.

    The name suffix is checked before the Accept header for each encoding,
    and RSS before Atom. A matched suffix is stripped from the returned name.

    Args:
        name: Requested resource name, e.g. "gitea.rss"
        accept: Value of the Accept request header

    Returns:
        FeedRequest with the feed flag, the name without the feed suffix and
        the selected FeedType
    """
    accept = accept or ""

    if name.endswith(RSS_SUFFIX):
        return FeedRequest(True, name[: -len(RSS_SUFFIX)], FeedType.RSS)
    if FeedType.RSS.content_type in accept:
        return FeedRequest(True, name, FeedType.RSS)

    if name.endswith(ATOM_SUFFIX):
        return FeedRequest(True, name[: -len(ATOM_SUFFIX)], FeedType.ATOM)
    if FeedType.ATOM.content_type in accept:
        return FeedRequest(True, name, FeedType.ATOM)

    return FeedRequest(False, name, FeedType.NONE)
