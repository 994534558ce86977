from typing import Any


class FlowError(Exception):
    """Raised when a flow cannot produce a valid response.

    `message` is user-facing and already localized.
    """

    def __init__(self, message: str, *, flow_name: str | None = None):
        super().__init__(message)
        self.message = message
        self.flow_name = flow_name


class FlowValidationError(FlowError):
    """The request failed its schema; no provider call was made."""

    def __init__(
        self,
        message: str,
        *,
        flow_name: str | None = None,
        errors: list[dict[str, Any]] | None = None,
    ):
        super().__init__(message, flow_name=flow_name)
        self.errors = errors or []
