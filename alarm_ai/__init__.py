"""Convenience exports for the alarm_ai package.

The package is organized by capability (llm, documents, processing,
workflows). This module re-exports the entry points most callers need so
``from alarm_ai import run_alarm_job`` works without knowing the layout.
"""

from .cancellation import CancellationToken
from .config import WorkflowSettings, load_settings
from .errors import (
    AlarmAIError,
    ConfigurationError,
    InputError,
    OperationCancelled,
    PersistenceError,
    WorkflowError,
    WorkflowHTTPError,
    WorkflowProtocolError,
)
from .llm.answer_extractor import extract_text
from .llm.workflow_client import WorkflowClient, WorkflowRunResult
from .processing.batch_processor import BatchRowProcessor, RunSummary
from .workflows.alarm_job import default_output_path, run_alarm_job

__all__ = [
    "CancellationToken",
    "WorkflowSettings",
    "load_settings",
    "AlarmAIError",
    "ConfigurationError",
    "InputError",
    "OperationCancelled",
    "PersistenceError",
    "WorkflowError",
    "WorkflowHTTPError",
    "WorkflowProtocolError",
    "extract_text",
    "WorkflowClient",
    "WorkflowRunResult",
    "BatchRowProcessor",
    "RunSummary",
    "default_output_path",
    "run_alarm_job",
]
