"""
Dweet key/value publishing adapter for StormWatch.

Reports are posted to a dweet.io "thing" so that the latest result is
visible for 24 hours at /get/latest/dweet/for/{thing}.
"""

from .client import DweetPublisher

__all__ = ["DweetPublisher"]
