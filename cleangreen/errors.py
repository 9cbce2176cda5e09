"""Portal error taxonomy - validation errors, request failures and domain rejections"""

from typing import Optional

from .notices import Notice, failure


class PortalError(Exception):
    """Base error rendered as a JSON body with a destructive notice"""

    status_code = 400
    title = "Error"

    def __init__(self, message: str, title: Optional[str] = None):
        super().__init__(message)
        self.message = message
        if title:
            self.title = title

    @property
    def notice(self) -> Notice:
        return failure(self.title, self.message)

    def to_dict(self) -> dict:
        return {"detail": self.message, "notice": self.notice.model_dump()}


# ---------------------------------------------------------------------------
# Validation errors - raised before any request is sent
# ---------------------------------------------------------------------------


class ValidationFailed(PortalError):
    status_code = 400
    title = "Missing information"


class StepValidationError(ValidationFailed):
    """A wizard step gate failed"""

    def __init__(self, step: int, missing: list[str]):
        self.step = step
        self.missing = missing
        super().__init__(f"Please complete: {', '.join(missing)}")

    def to_dict(self) -> dict:
        body = super().to_dict()
        body["step"] = self.step
        body["missing"] = self.missing
        return body


class AcknowledgmentRequiredError(ValidationFailed):
    title = "Acknowledgment required"


class InvalidTransitionError(PortalError):
    status_code = 409
    title = "Invalid step"


class PermissionDenied(PortalError):
    status_code = 403
    title = "Access denied"


# ---------------------------------------------------------------------------
# Request failures - non-2xx or transport errors from the backend
# ---------------------------------------------------------------------------


class BackendRequestError(PortalError):
    title = "Request failed"

    def __init__(self, message: str, status: int = 502, title: Optional[str] = None):
        self.backend_status = status
        super().__init__(message, title)

    @property
    def status_code(self) -> int:  # type: ignore[override]
        if self.backend_status == 0 or self.backend_status == 503:
            return 503
        if 400 <= self.backend_status < 500:
            return self.backend_status
        return 502


class BookingSubmissionError(BackendRequestError):
    """Submission failed; carries the unchanged payment-step state back to the caller"""

    title = "Booking Failed"

    def __init__(self, message: str, status: int = 502, state: Optional[dict] = None):
        self.state = state
        super().__init__(message, status)

    def to_dict(self) -> dict:
        body = super().to_dict()
        if self.state is not None:
            body["state"] = self.state
        return body


# ---------------------------------------------------------------------------
# Domain rejections - the request was understood but refused
# ---------------------------------------------------------------------------


class DomainRejection(PortalError):
    status_code = 422
