"""
Core domain models for StormWatch.

This module defines the core domain models using Pydantic v2
for type safety and validation.
"""

from typing import Dict, List, NamedTuple, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from shapely.geometry import Polygon
from shapely.geometry.base import BaseGeometry

# 경고 폴리곤 식별자
WARNING_POLY_NAME = "WarningPoly"

# 교차 지역이 없을 때 사용하는 센티넬 상태
NO_RISK_STATUS = "no regions at risk"

Point = Tuple[float, float]


class CoordinatePair(NamedTuple):
    """원문 순서 그대로의 좌표 쌍 (위도, 경도)"""
    first: float
    second: float


class AlertDelivery(BaseModel):
    """소스 어댑터가 전달하는 경보 원본"""
    source: str
    name: str = ""
    body: bytes = b""
    error: Optional[str] = None


class Alert(BaseModel):
    """Earth Networks 경보 레코드"""
    model_config = ConfigDict(frozen=True)

    alert_type: Optional[str] = None
    alert_type_name: str = ""
    issued_at_utc: str = ""
    raw_message: str


class WarningPolygon(BaseModel):
    """경보 구역 폴리곤 (경도, 위도 순서의 닫힌 단일 링)"""
    model_config = ConfigDict(frozen=True)

    name: str = WARNING_POLY_NAME
    ring: Tuple[Point, ...]

    @property
    def geometry(self) -> Polygon:
        return Polygon(self.ring)

    def to_feature(self) -> Dict:
        """GeoJSON Feature 형태로 변환합니다."""
        return {
            "type": "Feature",
            "properties": {"name": self.name},
            "geometry": {
                "type": "Polygon",
                "coordinates": [[list(point) for point in self.ring]],
            },
        }


class Region(BaseModel):
    """행정 구역 경계"""
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str
    code: str
    boundary: Optional[BaseGeometry] = None
    error: Optional[str] = None


class RegionMatch(BaseModel):
    name: str
    code: str


class SkippedRegion(BaseModel):
    name: str
    code: str
    reason: str


class IntersectionResult(BaseModel):
    """교차 검사 결과"""
    matches: List[RegionMatch] = Field(default_factory=list)
    analyzed: int = 0
    skipped: List[SkippedRegion] = Field(default_factory=list)


class Report(BaseModel):
    """발송용 요약 보고서"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    report_time_utc: str
    alert_type: str
    alert_issued_utc: str
    regions_analyzed: int
    regions_at_risk: int
    regions_skipped: Optional[int] = None
    matches: List[Dict[str, str]]
    truncated: Optional[bool] = None
    omitted: Optional[int] = None


class StatusReport(BaseModel):
    """실패 시 발송하는 상태 레코드"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    report_time_utc: str
    status: str = "failed"
    error_kind: str
    message: str
    source: Optional[str] = None
    alert_type: Optional[str] = None
    alert_issued_utc: Optional[str] = None
