"""
Local file alert source for StormWatch.
"""

import asyncio
from pathlib import Path
from typing import AsyncIterator, Iterable, List, Union

from stormwatch.core.models import AlertDelivery
from stormwatch.observability.logging_setup import get_logger

log = get_logger("stormwatch.files")

class LocalFileSource:
    """로컬 파일 경보 소스"""

    def __init__(self, paths: Iterable[Union[str, Path]]):
        """
        초기화합니다.

        Args:
            paths: 처리할 경보 파일 경로들 (순서대로 처리)
        """
        self.paths: List[Path] = [Path(p) for p in paths]

    async def recv(self) -> AsyncIterator[AlertDelivery]:
        for path in self.paths:
            try:
                body = await asyncio.to_thread(path.read_bytes)
            except OSError as e:
                log.error(f"경보 파일을 읽을 수 없습니다 path:{path} error:{e}")
                yield AlertDelivery(source=str(path), name=path.name, error=f"Cannot read {path}: {e}")
                continue
            log.info(f"경보 파일 읽음 path:{path} bytes:{len(body)}")
            yield AlertDelivery(source=str(path), name=path.name, body=body)
