"""
Geographic utilities for StormWatch.

This module provides small coordinate helpers used around the
shapely geometry operations: range validation and bounding boxes.
"""

from typing import Iterable, Tuple

BBox = Tuple[float, float, float, float]


def validate_coordinates(lat: float, lon: float) -> bool:
    """
    좌표가 유효한지 확인합니다.

    Args:
        lat: 위도
        lon: 경도

    Returns:
        좌표가 유효하면 True
    """
    return -90 <= lat <= 90 and -180 <= lon <= 180


def calculate_bounding_box(points: Iterable[Tuple[float, float]]) -> BBox:
    """
    점 목록의 경계 상자를 계산합니다.

    Args:
        points: 꼭짓점들 [(경도, 위도), ...]

    Returns:
        (min_lon, min_lat, max_lon, max_lat)
    """
    points = list(points)
    if not points:
        return (0, 0, 0, 0)

    lons = [p[0] for p in points]
    lats = [p[1] for p in points]

    return (min(lons), min(lats), max(lons), max(lats))


def bbox_intersects(a: BBox, b: BBox) -> bool:
    """두 경계 상자가 겹치거나 맞닿아 있으면 True"""
    return a[0] <= b[2] and b[0] <= a[2] and a[1] <= b[3] and b[1] <= a[3]
