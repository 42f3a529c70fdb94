"""Feed request orchestration for gitfeed."""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from .config import Config
from .convert import FeedItemConverter
from .errors import FeedError
from .loader import actions_from_rows
from .logging_config import create_execution_logger, setup_structured_logging
from .models import FeedItem
from .negotiate import FeedType, detect_feed_type

# Setup structured logging
setup_structured_logging(Config().log_level)


@dataclass
class FeedResponse:
    """What a web layer needs to serialize a feed request."""

    is_feed: bool
    name: str
    feed_type: FeedType
    items: list[FeedItem] = field(default_factory=list)


def handle_feed_request(
    name: str,
    accept: str,
    rows: list[dict[str, Any]],
    converter: FeedItemConverter | None = None,
) -> FeedResponse:
    """
    Turn a resource request and its activity rows into feed items.

    Args:
        name: Requested resource name, possibly ending in .rss or .atom
        accept: Accept header of the request
        rows: Raw activity rows in chronological order
        converter: Converter to use; built from the environment when omitted

    Returns:
        FeedResponse; items stay empty when the request is not a feed request

    Raises:
        FeedError: If the rows cannot be decoded or converted
    """
    execution_id = f"feed_{datetime.now(UTC).strftime('%Y%m%d_%H%M%S_%f')}"
    main_logger = create_execution_logger("handler", execution_id)

    request = detect_feed_type(name, accept)
    if not request.is_feed:
        main_logger.debug(f"Not a feed request: {name}")
        return FeedResponse(False, request.name, request.feed_type)

    main_logger.log_execution_start(feed_type=request.feed_type.value, resource=request.name)

    metrics = {"actions": len(rows), "items": 0}

    try:
        if converter is None:
            converter = FeedItemConverter.from_config(Config(), execution_id=execution_id)

        actions = actions_from_rows(rows, execution_id=execution_id)
        items = converter.convert(actions)
        metrics["items"] = len(items)
    except FeedError as e:
        main_logger.error(
            f"Failed to build {request.feed_type.value} feed for {request.name}: {e}",
            feed_type=request.feed_type.value,
            error=str(e),
        )
        main_logger.log_execution_end(success=False, metrics=metrics)
        raise

    main_logger.log_metrics(metrics)
    main_logger.log_execution_end(success=True)

    return FeedResponse(True, request.name, request.feed_type, items)
