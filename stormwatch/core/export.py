"""
Display artifact export for StormWatch.

The web map reads the latest warning area from a small script that
assigns the polygon's GeoJSON Feature to a global variable.
"""

import json
import re

from stormwatch.core.models import WarningPolygon

DEFAULT_VARIABLE = "stormArea"

_IDENTIFIER = re.compile(r"[A-Za-z_$][A-Za-z0-9_$]*")


def to_display_script(polygon: WarningPolygon, variable: str = DEFAULT_VARIABLE) -> str:
    """
    경고 폴리곤을 "var stormArea = {...};" 형식의 스크립트로 변환합니다.

    Raises:
        ValueError: 변수 이름이 JavaScript 식별자가 아닌 경우
    """
    if not _IDENTIFIER.fullmatch(variable):
        raise ValueError(f"Invalid JavaScript variable name: {variable!r}")
    return f"var {variable} = {json.dumps(polygon.to_feature())};"
