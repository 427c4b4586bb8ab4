"""
Coordinate extraction for StormWatch.

This module contains pure functions that locate the warning polygon
inside the CAP XML embedded in an alert and tokenize it into
coordinate pairs.
"""

import math
import xml.etree.ElementTree as ET
from typing import List

from stormwatch.core.errors import InvalidCoordinateToken, MalformedPayload
from stormwatch.core.models import CoordinatePair


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def extract_polygon_text(raw_message: str) -> str:
    """
    CAP XML에서 alert/info[0]/area[0]/polygon 텍스트를 찾습니다.

    Args:
        raw_message: 경보에 내장된 XML 문자열

    Returns:
        좌표 텍스트

    Raises:
        MalformedPayload: XML 오류, 폴리곤 누락 또는 복수 폴리곤
    """
    try:
        root = ET.fromstring(raw_message)
    except ET.ParseError as e:
        raise MalformedPayload(f"RawMessage is not well-formed XML: {e}")

    if _local_name(root.tag) != "alert":
        raise MalformedPayload(f"Unexpected root element '{_local_name(root.tag)}', expecting 'alert'")

    # 다국어 info 블록은 같은 폴리곤을 반복하므로 서로 다른 폴리곤만 센다
    distinct = {
        " ".join((el.text or "").split())
        for el in root.iter()
        if _local_name(el.tag) == "polygon"
    }
    if len(distinct) > 1:
        raise MalformedPayload(
            f"Alert contains {len(distinct)} polygons, only a single polygon is supported"
        )

    info = root.find("{*}info")
    if info is None:
        raise MalformedPayload("Alert has no info element")
    area = info.find("{*}area")
    if area is None:
        raise MalformedPayload("Alert info has no area element")
    polygon = area.find("{*}polygon")
    if polygon is None:
        raise MalformedPayload("Alert area has no polygon element")

    text = (polygon.text or "").strip()
    if not text:
        raise MalformedPayload("Alert polygon is empty")
    return text


def tokenize_polygon(text: str) -> List[CoordinatePair]:
    """
    "위도 경도, 위도 경도, ..." 형식의 텍스트를 좌표 쌍으로 분리합니다.

    Raises:
        InvalidCoordinateToken: 쌍이 숫자 두 개로 이루어지지 않은 경우
    """
    pairs: List[CoordinatePair] = []
    for chunk in text.split(","):
        chunk = chunk.strip()
        if not chunk:
            continue
        tokens = chunk.split()
        if len(tokens) != 2:
            raise InvalidCoordinateToken(
                f"Coordinate pair '{chunk}' must contain exactly two numbers"
            )
        try:
            first, second = float(tokens[0]), float(tokens[1])
        except ValueError:
            raise InvalidCoordinateToken(f"Coordinate pair '{chunk}' contains a non-numeric token")
        if not (math.isfinite(first) and math.isfinite(second)):
            raise InvalidCoordinateToken(f"Coordinate pair '{chunk}' is not finite")
        pairs.append(CoordinatePair(first, second))
    return pairs


def extract_coordinate_pairs(raw_message: str) -> List[CoordinatePair]:
    return tokenize_polygon(extract_polygon_text(raw_message))
