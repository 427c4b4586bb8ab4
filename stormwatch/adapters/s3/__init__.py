"""
Object storage (S3) adapters for StormWatch.

Handles "new object" events, downloads the alert object and uploads
the display artifact to a public bucket.
"""

from .client import S3ArtifactSink, S3ObjectSource, create_client, parse_s3_event

__all__ = ["S3ArtifactSink", "S3ObjectSource", "create_client", "parse_s3_event"]
