"""
Intersection engine for StormWatch.

Tests the warning polygon against every region of the catalog in
catalog order. Any shared area, edge or vertex counts as a match.
A failure on a single region is logged and the region is skipped.
"""

import shapely
from shapely.errors import GEOSException
from shapely.geometry.base import BaseGeometry

from stormwatch.common.geo import BBox, bbox_intersects, calculate_bounding_box
from stormwatch.core.catalog import RegionCatalog
from stormwatch.core.errors import RegionGeometryError
from stormwatch.core.models import (
    IntersectionResult,
    Region,
    RegionMatch,
    SkippedRegion,
    WarningPolygon,
)
from stormwatch.observability.logging_setup import get_logger

log = get_logger("stormwatch.intersect")


def _test_geometry(polygon: WarningPolygon) -> BaseGeometry:
    geometry = polygon.geometry
    if not geometry.is_valid:
        # 링 자체는 그대로 두고 검사용 형상만 보정
        log.warning("경고 폴리곤이 유효하지 않아 보정 후 검사합니다", reason=shapely.is_valid_reason(geometry))
        geometry = shapely.make_valid(geometry)
    return geometry


def region_intersects(region: Region, geometry: BaseGeometry, bbox: BBox) -> bool:
    """
    단일 지역이 경고 구역과 교차하는지 확인합니다.

    Args:
        region: 검사할 지역
        geometry: 경고 구역 형상
        bbox: 경고 구역 경계 상자 (사전 필터)

    Raises:
        RegionGeometryError: 지역 경계를 검사할 수 없는 경우
    """
    if region.error:
        raise RegionGeometryError(region.name, region.code, region.error)
    if region.boundary is None or region.boundary.is_empty:
        raise RegionGeometryError(region.name, region.code, "region boundary is empty")
    if not region.boundary.is_valid:
        raise RegionGeometryError(region.name, region.code,
                                  f"invalid boundary: {shapely.is_valid_reason(region.boundary)}")

    try:
        if not bbox_intersects(bbox, region.boundary.bounds):
            return False
        return bool(region.boundary.intersects(geometry))
    except (GEOSException, ValueError) as e:
        raise RegionGeometryError(region.name, region.code, f"intersection test failed: {e}")


def find_intersections(polygon: WarningPolygon, catalog: RegionCatalog) -> IntersectionResult:
    """
    경고 폴리곤과 교차하는 지역을 카탈로그 순서대로 수집합니다.

    Args:
        polygon: 경고 폴리곤
        catalog: 지역 카탈로그

    Returns:
        교차 결과 (일치 목록, 검사한 지역 수, 건너뛴 지역)
    """
    geometry = _test_geometry(polygon)
    bbox = calculate_bounding_box(polygon.ring)
    result = IntersectionResult()

    log.info("교차 지역 검사 시작", regions=len(catalog))
    for region in catalog:
        try:
            hit = region_intersects(region, geometry, bbox)
        except RegionGeometryError as e:
            log.warning("지역 검사 실패, 건너뜁니다", region=e.name, code=e.code, error=e.message)
            result.skipped.append(SkippedRegion(name=e.name, code=e.code, reason=e.message))
            continue

        result.analyzed += 1
        if hit:
            result.matches.append(RegionMatch(name=region.name, code=region.code))
            log.info("경보 구역이 지역과 교차합니다", region=region.name, code=region.code)

    log.info("교차 지역 검사 완료",
             analyzed=result.analyzed,
             at_risk=len(result.matches),
             skipped=len(result.skipped))
    return result
