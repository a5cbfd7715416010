"""
Co-innovation exception hierarchy.

Services raise these types; blueprints register handlers against them once
and get consistent HTTP status codes everywhere.

Usage:
    from coinnovation.core.exceptions import NotFoundError, FlowLoadError

    raise NotFoundError(resource="Step", resource_id="s3")
    raise FlowLoadError("Process step source returned no steps")
"""


class NotFoundError(Exception):
    """Raised when a requested step (or other resource) does not exist.

    Args:
        resource: Human-readable entity name (e.g. "Step").
        resource_id: The id that was looked up.
    """

    def __init__(self, resource: str, resource_id: str | None = None) -> None:
        self.resource = resource
        self.resource_id = resource_id
        msg = f"{resource}"
        if resource_id is not None:
            msg += f" id={resource_id}"
        msg += " not found"
        super().__init__(msg)


class ValidationError(Exception):
    """Raised when loaded data is well-formed but violates a model rule.

    The flow loader converts it to ``FlowLoadError``; it never reaches a
    blueprint directly.

    Args:
        message: Human-readable explanation of what failed.
        details: Optional field-level breakdown for structured API responses.
    """

    def __init__(self, message: str, details: dict | None = None) -> None:
        self.details = details or {}
        super().__init__(message)


class DuplicateStepError(ValidationError):
    """Two or more process steps share the same id."""

    def __init__(self, duplicate_ids: list[str]) -> None:
        self.duplicate_ids = list(duplicate_ids)
        super().__init__(
            f"Duplicate step ids: {', '.join(self.duplicate_ids)}",
            details={"duplicate_ids": self.duplicate_ids},
        )


class DataSourceError(Exception):
    """A data source returned something other than a ``{"data": [...]}`` envelope."""

    def __init__(self, source: str, reason: str) -> None:
        self.source = source
        self.reason = reason
        super().__init__(f"{source}: {reason}")


class FlowLoadError(Exception):
    """Initialization failed; the flowchart must not be rendered.

    Raised when the process-step source yields no steps or the steps fail
    model validation. An empty project source is not an error.
    """


class LayoutError(AssertionError):
    """Layout invoked with arguments that indicate a data-modeling bug."""
