"""
Region catalog for StormWatch.

This module loads the administrative-region boundary dataset
(a GeoJSON FeatureCollection) once and exposes it as an ordered,
read-only collection of Region models.
"""

import json
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, Tuple, Union

from jsonschema import validate
from jsonschema.exceptions import ValidationError
from shapely.errors import GEOSException
from shapely.geometry import shape

from stormwatch.core.errors import CatalogLoadError
from stormwatch.core.models import Region
from stormwatch.observability.logging_setup import get_logger
from stormwatch.schemas import load_schema

log = get_logger("stormwatch.catalog")

SCHEMA = load_schema("region_collection")

# 지원하는 경계 형상
BOUNDARY_TYPES = ("Polygon", "MultiPolygon")

DEFAULT_NAME_PROPERTY = "COM_NAME"
DEFAULT_CODE_PROPERTY = "COM_CODE"


class RegionCatalog:
    """읽기 전용 지역 카탈로그"""

    def __init__(self, regions: Iterable[Region], source: str = "<memory>"):
        self._regions: Tuple[Region, ...] = tuple(regions)
        self.source = source

    def __len__(self) -> int:
        return len(self._regions)

    def __iter__(self) -> Iterator[Region]:
        return iter(self._regions)

    def __getitem__(self, index: int) -> Region:
        return self._regions[index]

    @property
    def regions(self) -> Tuple[Region, ...]:
        return self._regions

    @classmethod
    def from_geojson(cls,
                     document: Dict[str, Any],
                     *,
                     source: str = "<memory>",
                     name_property: str = DEFAULT_NAME_PROPERTY,
                     code_property: str = DEFAULT_CODE_PROPERTY) -> "RegionCatalog":
        """
        FeatureCollection 문서로 카탈로그를 생성합니다.

        Args:
            document: GeoJSON FeatureCollection
            source: 로그용 출처 표시
            name_property: 지역 이름 속성
            code_property: 지역 코드 속성

        Raises:
            CatalogLoadError: 문서가 FeatureCollection 스키마를 따르지 않는 경우
        """
        try:
            validate(instance=document, schema=SCHEMA)
        except ValidationError as e:
            raise CatalogLoadError(f"Region dataset {source} is not a valid FeatureCollection: {e.message}")

        regions = [
            _to_region(feature, name_property, code_property)
            for feature in document["features"]
        ]
        broken = sum(1 for r in regions if r.error)
        if broken:
            log.warning("경계가 손상된 지역이 있습니다", source=source, broken=broken)

        log.info("지역 카탈로그 로드 완료", source=source, regions=len(regions))
        return cls(regions, source=source)

    @classmethod
    def from_path(cls, path: Union[str, Path], **kwargs) -> "RegionCatalog":
        """
        파일에서 카탈로그를 읽어옵니다.

        Raises:
            CatalogLoadError: 파일이 없거나 JSON이 아닌 경우
        """
        path = Path(path)
        try:
            document = json.loads(path.read_text(encoding="utf-8"))
        except OSError as e:
            raise CatalogLoadError(f"Cannot read region dataset {path}: {e}")
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise CatalogLoadError(f"Region dataset {path} is not valid JSON: {e}")
        return cls.from_geojson(document, source=str(path), **kwargs)


def _to_region(feature: Dict[str, Any], name_property: str, code_property: str) -> Region:
    props = feature.get("properties") or {}
    name = str(props.get(name_property, ""))
    code = str(props.get(code_property, ""))

    geometry = feature.get("geometry")
    if not geometry:
        return Region(name=name, code=code, error="feature has no geometry")

    geom_type = geometry.get("type")
    if geom_type not in BOUNDARY_TYPES:
        return Region(name=name, code=code, error=f"unsupported geometry type {geom_type}")

    try:
        boundary = shape(geometry)
    except (GEOSException, ValueError, TypeError, KeyError, IndexError, AttributeError) as e:
        return Region(name=name, code=code, error=f"invalid {geom_type}: {e}")

    return Region(name=name, code=code, boundary=boundary)


@lru_cache(maxsize=None)
def _load_cached(path: str, name_property: str, code_property: str) -> RegionCatalog:
    return RegionCatalog.from_path(path, name_property=name_property, code_property=code_property)


def load_catalog(path: Union[str, Path],
                 *,
                 name_property: str = DEFAULT_NAME_PROPERTY,
                 code_property: str = DEFAULT_CODE_PROPERTY) -> RegionCatalog:
    """프로세스당 한 번만 카탈로그를 로드합니다."""
    return _load_cached(str(Path(path).resolve()), name_property, code_property)
