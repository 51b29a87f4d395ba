"""Exceptions raised by the reference resolution engine."""


class ReflinkError(Exception):
    """Base class for all reflink errors."""


class ConfigurationError(ReflinkError):
    """A user-supplied autolink or remote entry is malformed."""


class AutolinkCompileError(ReflinkError):
    """An autolink template could not be compiled into a detection pattern."""

    def __init__(self, prefix: str, url: str, title: str | None, original: Exception):
        super().__init__(
            f"Failed to compile autolink: prefix={prefix}, url={url}, title={title}: {original}"
        )
        self.original = original


class ResolutionFailure(ReflinkError):
    """The hosting service could not be queried for an issue or pull request."""
