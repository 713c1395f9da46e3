"""
Error taxonomy for rendering.

Integrity errors mean an upstream collaborator (loader, hasher, authoring
tool) handed over trees that do not line up. They abort the render of the
whole document.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class IntegrityErrorType(str, Enum):
    """Machine-interpretable integrity failures."""

    ADDRESS_SHAPE_MISMATCH = "ADDRESS_SHAPE_MISMATCH"
    """Content-address tree does not mirror the resolved form."""

    AUTHORED_SHAPE_MISMATCH = "AUTHORED_SHAPE_MISMATCH"
    """Authored and resolved forms group into different series/paragraph runs."""

    THREAD_DEPTH_EXCEEDED = "THREAD_DEPTH_EXCEEDED"
    """A comment reply graph nests deeper than the configured bound."""

    RENDER_BUDGET_EXCEEDED = "RENDER_BUDGET_EXCEEDED"
    """Composition ran past its wall-clock budget."""


class IntegrityReport(BaseModel):
    """Structured description of an integrity failure."""

    error_type: IntegrityErrorType
    path: List[Any] = Field(default_factory=list, description="Wire path of the node being composed")
    message: str = Field(..., description="Human-readable error message")
    details: Dict[str, Any] = Field(default_factory=dict, description="Additional error context")
    digest: Optional[str] = None

    def to_log_message(self) -> str:
        """Format error for logging."""
        loc = f"digest:{self.digest[:12]}" if self.digest else f"path:{self.path}"
        return f"[{self.error_type.value}] @ {loc}: {self.message}"


class IntegrityError(Exception):
    def __init__(self, report: IntegrityReport) -> None:
        super().__init__(report.to_log_message())
        self.report = report

    @property
    def error_type(self) -> IntegrityErrorType:
        return self.report.error_type
