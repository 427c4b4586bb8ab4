"""
JSON schemas for StormWatch inputs.
"""

import json
from pathlib import Path
from typing import Any, Dict

SCHEMA_DIR = Path(__file__).parent


def load_schema(name: str) -> Dict[str, Any]:
    """스키마 파일을 읽어옵니다."""
    return json.loads((SCHEMA_DIR / f"{name}.schema.json").read_text(encoding="utf-8"))
