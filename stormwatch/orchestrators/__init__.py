"""
Orchestrators for StormWatch.

This module contains the coordinator that sequences the pipeline
stages between the alert source and the report publisher.
"""
from .coordinator import PipelineCoordinator, PipelineOutcome, PipelineState, RunSummary

__all__ = ["PipelineCoordinator", "PipelineOutcome", "PipelineState", "RunSummary"]
