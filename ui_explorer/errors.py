from __future__ import annotations

"""Exception types raised by the exploration engine."""


class ExplorerError(RuntimeError):
    """Base class for every error raised by `ui_explorer`."""


class EmptyCandidateSet(ExplorerError):
    """No element can be chosen in the current decision step.

    Raised when a state has no actionable elements, or when every candidate was
    filtered out by a selector. The caller must treat the step as failed.
    """


class SchemaError(ExplorerError, ValueError):
    """The training schema file is unreadable or malformed."""


class ModelLoadError(ExplorerError):
    """The serialized classifier could not be loaded."""


class ConfigError(ExplorerError, ValueError):
    """A configuration value is invalid."""
