"""
StormWatch: lightning alert area analysis.

Reads Earth Networks alert envelopes, builds the warning polygon from the
embedded CAP message, intersects it with administrative region boundaries
and publishes a compact report of the regions at risk.
"""

__version__ = "0.2.0"
