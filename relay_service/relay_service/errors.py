"""Error taxonomy for the relay service.

Every failure detected while handling a submission maps to one of these
exceptions. Each carries the caller-visible error code and HTTP status so the
server can render it without knowing which stage raised it.
"""

from typing import Any


class RelayServiceError(Exception):
    """Base class for errors that terminate a submission.

    Attributes:
        error_code: Machine-readable code returned to the caller.
        status_code: HTTP status of the error response.
    """

    error_code = "relay_error"
    status_code = 400

    def __init__(self, message: str | None = None):
        self.message = message or self.error_code
        super().__init__(f"[{self.error_code}] {self.message}")

    def to_content(self) -> dict[str, Any]:
        """Render the error as the JSON body sent back to the caller."""
        return {"ok": False, "error": self.error_code}


class PayloadTooLargeError(RelayServiceError):
    """Inbound body exceeded the byte ceiling."""

    error_code = "payload_too_large"
    status_code = 413


class InvalidJSONError(RelayServiceError):
    """Inbound body is not valid JSON."""

    error_code = "invalid_json"
    status_code = 400


class EmptyRowsError(RelayServiceError):
    """Submission is not a row collection, or the collection is empty."""

    error_code = "empty_rows"
    status_code = 400


class InvalidRowError(RelayServiceError):
    """A row failed validation after sanitization.

    Args:
        item_name: Sanitized item name of the offending row.
        qty: Sanitized quantity of the offending row.
    """

    error_code = "invalid_row"
    status_code = 422

    def __init__(self, item_name: str, qty: int):
        self.item_name = item_name
        self.qty = qty
        super().__init__(f"row rejected (item_name={item_name!r}, qty={qty})")

    def to_content(self) -> dict[str, Any]:
        content = super().to_content()
        content["hint"] = {"item_name": self.item_name, "qty": self.qty}
        return content


class ConfigurationError(RelayServiceError):
    """A required setting is missing from the environment."""

    error_code = "not_configured"
    status_code = 500
