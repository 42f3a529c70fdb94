"""Exceptions raised by gitfeed."""


class FeedError(Exception):
    """Base class for gitfeed errors."""


class UnknownActionTypeError(FeedError):
    """An action has an op type that cannot be turned into a feed item."""

    def __init__(self, op_type):
        self.op_type = op_type
        super().__init__(f"unknown action type: {op_type}")


class ActionDecodeError(FeedError):
    """A raw activity record or push payload could not be decoded."""


class RenderError(FeedError):
    """Rich-text rendering failed."""
