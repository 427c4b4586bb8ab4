"""
Local file display artifact sink for StormWatch.
"""

import asyncio
from pathlib import Path
from typing import Union

from stormwatch.core.export import DEFAULT_VARIABLE, to_display_script
from stormwatch.core.models import WarningPolygon
from stormwatch.observability.logging_setup import get_logger

log = get_logger("stormwatch.files")

class FileArtifactSink:
    """경고 구역 스크립트를 로컬 파일로 저장"""

    def __init__(self, path: Union[str, Path], variable: str = DEFAULT_VARIABLE):
        self.path = Path(path)
        self.variable = variable

    def _write(self, script: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(script, encoding="utf-8")

    async def export(self, polygon: WarningPolygon) -> None:
        script = to_display_script(polygon, self.variable)
        await asyncio.to_thread(self._write, script)
        log.info(f"경고 구역 스크립트 저장됨 path:{self.path}")
