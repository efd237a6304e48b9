"""Agent Editor client exceptions."""

from typing import Any


class AgentEditorError(Exception):
    """Base exception for Agent Editor client errors.

    Carries the server's error message plus optional field-level details
    and non-fatal warnings from the response body.
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        details: list[dict[str, Any]] | None = None,
        warnings: list[str] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.details = details or []
        self.warnings = warnings or []

    @property
    def full_message(self) -> str:
        """Message including joined field-level details, if any."""
        detail_messages = [
            str(detail.get("message", "")) for detail in self.details if detail.get("message")
        ]
        if not detail_messages:
            return self.message
        return f"{self.message}: {'; '.join(detail_messages)}"


class ValidationError(AgentEditorError):
    """Request validation failed (400/422)."""

    pass


class AuthenticationError(AgentEditorError):
    """Authentication failed (401)."""

    pass


class NotFoundError(AgentEditorError):
    """Agent or version not found (404)."""

    pass


class ServerError(AgentEditorError):
    """Server error (5xx)."""

    pass


class TransportError(AgentEditorError):
    """Request never produced a response (connection, timeout)."""

    pass


class SaveInProgressError(AgentEditorError):
    """Action attempted while a save is in flight."""

    pass


class CommitDialogClosedError(AgentEditorError):
    """Commit submitted without an open commit-notes dialog."""

    pass
