"""
Port interfaces for StormWatch hexagonal architecture.

This module defines the port interfaces (Protocols) that define
the contracts between the core pipeline and external adapters.
"""

from .ingest import AlertSourcePort
from .publish import ReportPublisherPort
from .artifact import DisplayArtifactPort

__all__ = ["AlertSourcePort", "ReportPublisherPort", "DisplayArtifactPort"]
