"""
Remote MQTT ingestion adapter for StormWatch.

This module provides the implementation of AlertSourcePort
for receiving Earth Networks alerts from a remote MQTT broker.
"""

from .client_async import RemoteMqttIngestor

__all__ = ["RemoteMqttIngestor"]
