"""Workflow service client, SSE framing and answer extraction."""

from .answer_extractor import extract_text
from .workflow_client import WorkflowClient, WorkflowRequest, WorkflowRunResult

__all__ = ["extract_text", "WorkflowClient", "WorkflowRequest", "WorkflowRunResult"]
