"""
Core domain models and pure functions for StormWatch.

This module contains the domain models and the alert-to-report
pipeline stages that are independent of external I/O.
"""

from .models import (
    Alert,
    AlertDelivery,
    CoordinatePair,
    IntersectionResult,
    Region,
    RegionMatch,
    Report,
    StatusReport,
    WarningPolygon,
)
from .alert import parse_alert
from .extract import extract_coordinate_pairs
from .polygon import build_warning_polygon
from .catalog import RegionCatalog, load_catalog
from .intersect import find_intersections
from .report import assemble_failure, assemble_report, serialize

__all__ = [
    "Alert", "AlertDelivery", "CoordinatePair", "IntersectionResult", "Region",
    "RegionMatch", "Report", "StatusReport", "WarningPolygon",
    "parse_alert", "extract_coordinate_pairs", "build_warning_polygon",
    "RegionCatalog", "load_catalog", "find_intersections",
    "assemble_report", "assemble_failure", "serialize",
]
