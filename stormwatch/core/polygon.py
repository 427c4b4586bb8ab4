"""
Warning polygon builder for StormWatch.

Earth Networks delivers latitude-first pairs; the region dataset and
shapely work longitude-first, so every pair is swapped here.
"""

from typing import List, Sequence

from stormwatch.common.geo import validate_coordinates
from stormwatch.core.errors import DegenerateRing
from stormwatch.core.models import WARNING_POLY_NAME, CoordinatePair, Point, WarningPolygon
from stormwatch.observability.logging_setup import get_logger

log = get_logger("stormwatch.polygon")


def to_ring(pairs: Sequence[CoordinatePair]) -> List[Point]:
    """
    (위도, 경도) 쌍을 (경도, 위도) 순서의 닫힌 링으로 변환합니다.

    Args:
        pairs: 원문 순서의 좌표 쌍

    Returns:
        첫 점과 마지막 점이 같은 링
    """
    ring: List[Point] = [(pair.second, pair.first) for pair in pairs]
    if ring and ring[0] != ring[-1]:
        ring.append(ring[0])
    return ring


def build_warning_polygon(pairs: Sequence[CoordinatePair]) -> WarningPolygon:
    """
    좌표 쌍으로 경고 폴리곤을 생성합니다.

    Raises:
        DegenerateRing: 닫은 뒤 고유 점이 3개 미만인 경우
    """
    ring = to_ring(pairs)

    distinct = len(set(ring))
    if distinct < 3:
        raise DegenerateRing(
            f"Warning polygon needs at least 3 distinct points, got {distinct}"
        )

    out_of_range = [p for p in ring if not validate_coordinates(p[1], p[0])]
    if out_of_range:
        # 공급자가 축 순서를 바꾼 경우일 수 있음
        log.warning("WGS84 범위를 벗어난 좌표가 있습니다", count=len(out_of_range), first=out_of_range[0])

    polygon = WarningPolygon(name=WARNING_POLY_NAME, ring=tuple(ring))
    log.info("경고 폴리곤 생성됨", points=len(ring))
    return polygon
