"""
Console report publisher for StormWatch.

Dry-run publisher: logs the report instead of sending it anywhere.
"""

from stormwatch.observability.logging_setup import get_logger

log = get_logger("stormwatch.console")

class ConsolePublisher:
    """콘솔 발송 어댑터 (드라이 런)"""

    def __init__(self):
        self.last_payload: bytes | None = None

    async def publish(self, payload: bytes) -> None:
        self.last_payload = payload
        log.info("[DRY_RUN] 보고서: " + payload.decode("utf-8", errors="replace"))
