"""
테스트 설정 및 픽스처

이 모듈은 pytest 설정과 공통 픽스처를 제공합니다.
"""

import json
from typing import Callable, List, Optional

import pytest

from stormwatch.core.catalog import RegionCatalog
from stormwatch.settings import Settings

CAP_NS = "urn:oasis:names:tc:emergency:cap:1.2"

# 경고 구역: 위도 11.45~11.65, 경도 104.85~105.05 (위도, 경도 순서)
CONTAINING_POLYGON = "11.45 104.85, 11.65 104.85, 11.65 105.05, 11.45 105.05, 11.45 104.85"

# 어느 지역과도 겹치지 않는 구역
DISJOINT_POLYGON = "10.0 103.0, 10.1 103.0, 10.1 103.1, 10.0 103.1, 10.0 103.0"


def square(min_lon: float, min_lat: float, size: float) -> dict:
    """경도, 위도 순서의 정사각형 Polygon 형상"""
    return {
        "type": "Polygon",
        "coordinates": [[
            [min_lon, min_lat],
            [min_lon + size, min_lat],
            [min_lon + size, min_lat + size],
            [min_lon, min_lat + size],
            [min_lon, min_lat],
        ]],
    }


def feature(name: str, code: str, geometry: Optional[dict]) -> dict:
    return {
        "type": "Feature",
        "properties": {"COM_NAME": name, "COM_CODE": code},
        "geometry": geometry,
    }


def cap_message(*polygons: str, namespace: str = CAP_NS) -> str:
    """polygon 텍스트를 담은 CAP XML 문자열"""
    infos = "".join(
        f"<info><event>Dangerous Thunderstorm</event>"
        f"<area><areaDesc>Alert Area</areaDesc><polygon>{p}</polygon></area></info>"
        for p in polygons
    )
    ns = f' xmlns="{namespace}"' if namespace else ""
    return f"<alert{ns}><identifier>test-alert</identifier>{infos}</alert>"


@pytest.fixture
def region_document() -> dict:
    """3개 지역 FeatureCollection"""
    return {
        "type": "FeatureCollection",
        "features": [
            feature("Chbar Ampov", "120801", square(104.90, 11.50, 0.10)),
            feature("Kbal Kaoh", "120802", square(105.10, 11.50, 0.10)),
            feature("Preaek Pra", "120803", square(104.50, 12.00, 0.10)),
        ],
    }


@pytest.fixture
def region_catalog(region_document) -> RegionCatalog:
    """테스트용 3개 지역 카탈로그"""
    return RegionCatalog.from_geojson(region_document, source="test")


@pytest.fixture
def alert_body() -> Callable[..., bytes]:
    """경보 JSON 본문 생성기"""
    def _build(raw_message: Optional[str] = None,
               polygon: str = CONTAINING_POLYGON,
               **overrides) -> bytes:
        envelope = {
            "AlertType": 3,
            "AlertTypeName": "Dangerous Thunderstorm",
            "IssuedDateTimeUtc": "2019-05-14T09:12:00Z",
            "RawMessage": raw_message if raw_message is not None else cap_message(polygon),
        }
        envelope.update(overrides)
        return json.dumps(envelope).encode("utf-8")
    return _build


class RecordingPublisher:
    """발송된 페이로드를 기록하는 테스트용 발송 어댑터"""

    def __init__(self, fail: bool = False):
        self.payloads: List[bytes] = []
        self.fail = fail

    async def publish(self, payload: bytes) -> None:
        self.payloads.append(payload)
        if self.fail:
            raise ConnectionError("publisher unavailable")

    @property
    def documents(self) -> List[dict]:
        return [json.loads(p) for p in self.payloads]


@pytest.fixture
def publisher() -> RecordingPublisher:
    return RecordingPublisher()


@pytest.fixture
def sample_settings():
    """테스트용 설정"""
    settings = Settings()
    settings.observability.service_name = "test-service"
    settings.observability.build_version = "1.0.0"
    settings.observability.log_level = "INFO"
    settings.observability.http_port = 8080
    return settings
