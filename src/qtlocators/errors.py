from __future__ import annotations


class LocatorPathError(ValueError):
    """Raised when a locator path cannot be tokenized or parsed.

    ``offset`` is the zero-based position in the source path where the
    problem was detected.
    """

    def __init__(self, reason: str, offset: int) -> None:
        super().__init__(f"{reason} at pos {offset}")
        self.reason = reason
        self.offset = offset


class PathLexError(LocatorPathError):
    pass


class PathParseError(LocatorPathError):
    pass
