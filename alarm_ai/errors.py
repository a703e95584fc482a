"""Exception hierarchy shared across the alarm answering pipeline."""

from __future__ import annotations

from typing import Any, Optional


class AlarmAIError(RuntimeError):
    """Base class for pipeline failures."""


class ConfigurationError(AlarmAIError):
    """Raised when the workflow URL or key is missing or unreadable."""


class InputError(AlarmAIError):
    """Raised when the source workbook or output path cannot be used."""


class WorkflowError(AlarmAIError):
    """Raised when a single workflow call fails (network or protocol)."""


class WorkflowHTTPError(WorkflowError):
    """Raised when the workflow endpoint answers with a non-success status."""

    def __init__(self, status_code: int, body: str) -> None:
        self.status_code = status_code
        self.body = body
        super().__init__(f"HTTP {status_code}: {body}")


class WorkflowProtocolError(WorkflowError):
    """Raised when an event payload in the stream is not valid JSON."""


class PersistenceError(AlarmAIError):
    """Raised when the workbook could not be saved after a successful row."""

    def __init__(self, message: str, summary: Optional[Any] = None) -> None:
        super().__init__(message)
        self.summary = summary


class StatusLogError(AlarmAIError):
    """Raised when a status log line cannot be written."""


class OperationCancelled(Exception):
    """Raised at a cancellation checkpoint once the run has been cancelled."""


__all__ = [
    "AlarmAIError",
    "ConfigurationError",
    "InputError",
    "WorkflowError",
    "WorkflowHTTPError",
    "WorkflowProtocolError",
    "PersistenceError",
    "StatusLogError",
    "OperationCancelled",
]
