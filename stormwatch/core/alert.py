"""
Alert envelope reader for StormWatch.

This module checks the alert container (file name and JSON body)
and converts the Earth Networks envelope into an Alert model.
"""

import json
import re
from typing import Any, Dict, Union

from jsonschema import validate
from jsonschema.exceptions import ValidationError

from stormwatch.core.errors import MalformedPayload, UnsupportedInputFormat
from stormwatch.core.models import Alert
from stormwatch.schemas import load_schema

SCHEMA = load_schema("alert_envelope")

_EXTENSION = re.compile(r"\.([^.]*)$")


def check_file_type(name: str) -> None:
    """
    파일 이름의 확장자가 JSON인지 확인합니다.

    이름이 비어 있으면 (MQTT, HTTP 등) 검사를 건너뜁니다.

    Raises:
        UnsupportedInputFormat: 확장자가 없거나 json이 아닌 경우
    """
    if not name:
        return
    match = _EXTENSION.search(name)
    if not match:
        raise UnsupportedInputFormat("Could not determine the file type.")
    if match.group(1).lower() != "json":
        raise UnsupportedInputFormat(
            f"Unsupported file type '{match.group(1)}', expecting JSON!"
        )


def parse_alert(body: Union[bytes, str], name: str = "") -> Alert:
    """
    경보 원본을 Alert 모델로 변환합니다.

    Args:
        body: JSON 경보 원본
        name: 파일 또는 객체 이름 (확장자 검사용)

    Returns:
        Alert 모델
    """
    check_file_type(name)

    try:
        if isinstance(body, bytes):
            obj = json.loads(body.decode("utf-8-sig"))
        else:
            obj = json.loads(body)
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise UnsupportedInputFormat(f"Alert container is not valid JSON: {e}")

    if not isinstance(obj, dict):
        raise UnsupportedInputFormat(
            f"Alert container must be a JSON object, got {type(obj).__name__}"
        )

    try:
        validate(instance=obj, schema=SCHEMA)
    except ValidationError as e:
        raise MalformedPayload(f"Alert envelope failed validation: {e.message}")

    return _to_alert(obj)


def _to_alert(obj: Dict[str, Any]) -> Alert:
    alert_type = obj.get("AlertType")
    return Alert(
        alert_type=str(alert_type) if alert_type is not None else None,
        alert_type_name=obj.get("AlertTypeName") or "",
        issued_at_utc=obj.get("IssuedDateTimeUtc") or "",
        raw_message=obj["RawMessage"],
    )
