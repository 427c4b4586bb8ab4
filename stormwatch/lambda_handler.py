"""
Object-storage trigger entry point for StormWatch.

Each "new object" event carries one alert file. The handler downloads
it, runs one pipeline invocation and publishes exactly one report or
status record. The region catalog is loaded once per container.
"""

import asyncio
from typing import Any, Dict, Optional

from stormwatch.adapters.s3 import S3ObjectSource, create_client, parse_s3_event
from stormwatch.core.errors import UnsupportedInputFormat
from stormwatch.main import build_coordinator, build_settings
from stormwatch.observability.logging_setup import get_logger, setup_logging
from stormwatch.orchestrators.coordinator import PipelineCoordinator, PipelineOutcome, PipelineState

log = get_logger("stormwatch.lambda")

_coordinator: Optional[PipelineCoordinator] = None
_s3_client = None


def _get_coordinator() -> PipelineCoordinator:
    # CatalogLoadError는 그대로 전파되어 콜드 스타트가 실패한다
    global _coordinator, _s3_client
    if _coordinator is None:
        settings = build_settings()
        setup_logging(settings.observability.log_level, json_logs=True)
        _s3_client = create_client(settings.s3.region_name, settings.s3.endpoint_url)
        _coordinator = build_coordinator(settings, _s3_client)
    return _coordinator


async def _handle(event: Dict[str, Any]) -> PipelineOutcome:
    coordinator = _get_coordinator()
    try:
        bucket, key = parse_s3_event(event)
    except ValueError as e:
        log.error(f"S3 이벤트 해석 실패: {e}")
        return await coordinator.publish_failure(UnsupportedInputFormat(str(e)), source="s3-event")

    outcome = None
    async for delivery in S3ObjectSource(_s3_client, bucket, key).recv():
        outcome = await coordinator.process(delivery)
    return outcome


def handler(event: Dict[str, Any], context: Any = None) -> Dict[str, Any]:
    """
    Lambda 핸들러.

    Args:
        event: S3 "ObjectCreated" 이벤트
        context: Lambda 컨텍스트 (사용하지 않음)

    Returns:
        처리 상태와 발송한 산출물
    """
    outcome = asyncio.run(_handle(event))
    return {
        "status": "ok" if outcome.state is PipelineState.DONE else "failed",
        "published": outcome.published,
        "errorKind": outcome.error_kind,
        "body": outcome.artifact.model_dump(by_alias=True, exclude_none=True),
    }
