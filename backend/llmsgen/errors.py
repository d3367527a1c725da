"""Error taxonomy shared by services and HTTP handlers.

Each error knows the status code it maps to. Routes let these propagate and
the exception handler registered in ``llmsgen.main`` renders them as
``{"error": message}`` bodies.
"""

from typing import Any


class LlmsGenError(Exception):
    """Base class for user-visible failures."""

    status_code = 500
    message = "An unexpected error occurred."

    def __init__(self, message: str | None = None, **extra: Any):
        self.message = message or self.message
        self.extra = extra
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        return {"error": self.message, **self.extra}


class BadRequest(LlmsGenError):
    status_code = 400
    message = "Invalid request."


class SurveyValidationError(BadRequest):
    """Survey input failed validation; carries a field -> message mapping."""

    message = "Survey input is invalid."

    def __init__(self, errors: dict[str, str]):
        super().__init__()
        self.errors = errors

    def to_dict(self) -> dict[str, Any]:
        return {"errors": self.errors}


class MissingSignature(BadRequest):
    message = "Missing Stripe signature."


class InvalidSignature(BadRequest):
    message = "Invalid signature."


class Unauthorized(LlmsGenError):
    status_code = 401
    message = "Unauthorized."


class PaymentRequired(LlmsGenError):
    status_code = 402
    message = "Payment required."


class RunNotFound(LlmsGenError):
    status_code = 404
    message = "Run not found."


class RunAlreadyPaid(LlmsGenError):
    status_code = 409
    message = "Run is already paid."


class NotConfigured(LlmsGenError):
    status_code = 500
    message = "Service is not configured."


class PersistenceFailure(LlmsGenError):
    status_code = 500
    message = "Failed to generate llms.txt."


class UpstreamFailure(LlmsGenError):
    """A third-party provider returned an error with no safe fallback."""

    status_code = 502
    message = "Upstream provider failed."
