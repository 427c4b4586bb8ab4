"""
Adapters for StormWatch hexagonal architecture.

This module contains the concrete implementations of port interfaces
that handle external I/O: alert sources, report publishers and
display artifact sinks.
"""

from .files import FileArtifactSink, LocalFileSource
from .s3 import S3ArtifactSink, S3ObjectSource, parse_s3_event
from .dweet import DweetPublisher
from .console import ConsolePublisher
from .mqtt_remote.client_async import RemoteMqttIngestor
from .mqtt_local.publisher_async import LocalMqttPublisher

__all__ = [
    "FileArtifactSink", "LocalFileSource",
    "S3ArtifactSink", "S3ObjectSource", "parse_s3_event",
    "DweetPublisher", "ConsolePublisher",
    "RemoteMqttIngestor", "LocalMqttPublisher",
]
