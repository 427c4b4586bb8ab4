"""
Local file adapters for StormWatch.

Reads alert files from disk and writes the display artifact to disk.
"""

from .source import LocalFileSource
from .artifact import FileArtifactSink

__all__ = ["LocalFileSource", "FileArtifactSink"]
