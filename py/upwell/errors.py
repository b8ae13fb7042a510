"""Exceptions raised by Upwell."""


class UpwellError(Exception):
    """Base class for all Upwell failures."""


class NotFoundError(UpwellError, KeyError):
    """A draft, bundle or comment id that is not known."""

    def __str__(self) -> str:
        # KeyError repr()s its argument; keep the plain message
        return str(self.args[0]) if self.args else ""


class MalformedContentError(UpwellError, ValueError):
    """Versioned content bytes that cannot be decoded."""


class MalformedArchiveError(UpwellError, ValueError):
    """A bundle archive that is truncated, unparseable or inconsistent."""
