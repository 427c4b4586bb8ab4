"""
Local MQTT publishing adapter for StormWatch.

This module provides the implementation of ReportPublisherPort
for publishing reports to a local MQTT broker.
"""

from .publisher_async import LocalMqttPublisher

__all__ = ["LocalMqttPublisher"]
