"""
HTTP endpoints for StormWatch.

This module implements health, readiness, metrics, and info endpoints
for monitoring, plus an alert submission endpoint that runs one
invocation of the pipeline per request.
"""

import time
from typing import Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from stormwatch.core.models import AlertDelivery
from stormwatch.observability import metrics as m
from stormwatch.observability.logging_setup import get_logger
from stormwatch.orchestrators.coordinator import PipelineCoordinator, PipelineState
from stormwatch.settings import Settings

log = get_logger("stormwatch.http")

def create_app(settings: Settings,
               coordinator: Optional[PipelineCoordinator] = None,
               catalog_error: Optional[str] = None) -> FastAPI:
    """
    FastAPI 애플리케이션을 생성합니다.

    Args:
        settings: 서비스 설정
        coordinator: 경보 처리 조정자 (없으면 /alerts 비활성)
        catalog_error: 카탈로그 로드 실패 메시지 (있으면 not ready)
    """
    app = FastAPI(
        title=settings.observability.service_name,
        version=settings.observability.build_version,
        description="StormWatch lightning alert area analysis service"
    )

    start_time = time.time()

    @app.get("/health")
    async def health():
        """헬스 체크 엔드포인트"""
        return JSONResponse({
            "status": "ok",
            "service": settings.observability.service_name,
            "timestamp": time.time()
        })

    @app.get("/ready")
    async def ready():
        """레디니스 체크 엔드포인트 (카탈로그 로드 여부)"""
        if catalog_error or coordinator is None:
            return JSONResponse({
                "status": "not_ready",
                "service": settings.observability.service_name,
                "reason": catalog_error or "coordinator not configured",
            }, status_code=503)
        return JSONResponse({
            "status": "ready",
            "service": settings.observability.service_name,
            "regions": len(coordinator.catalog),
            "timestamp": time.time()
        })

    @app.get("/metrics")
    async def metrics():
        """Prometheus 메트릭 엔드포인트"""
        if not settings.observability.metrics_enabled:
            raise HTTPException(status_code=503, detail="Metrics disabled")

        m.uptime_seconds.set(time.time() - start_time)
        return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)

    @app.get("/info")
    async def info():
        """서비스 정보 엔드포인트"""
        uptime = time.time() - start_time
        return JSONResponse({
            "service": settings.observability.service_name,
            "version": settings.observability.build_version,
            "build_date": settings.observability.build_date,
            "uptime_seconds": int(uptime),
            "metrics_enabled": settings.observability.metrics_enabled,
            "log_level": settings.observability.log_level,
            "publisher": "console" if settings.dry_run else settings.publisher,
            "catalog": settings.catalog.path,
        })

    @app.post("/alerts")
    async def submit_alert(request: Request):
        """경보 JSON 본문 1건을 처리하고 발송한 산출물을 반환합니다."""
        if coordinator is None:
            raise HTTPException(status_code=503, detail=catalog_error or "coordinator not configured")

        body = await request.body()
        outcome = await coordinator.process(AlertDelivery(source="http", body=body))
        log.info(f"HTTP 경보 처리 완료 state:{outcome.state.value} published:{outcome.published}")

        content = outcome.artifact.model_dump(by_alias=True, exclude_none=True)
        status_code = 200 if outcome.state is PipelineState.DONE else 422
        return JSONResponse(content, status_code=status_code)

    @app.get("/")
    async def root():
        """루트 엔드포인트"""
        return JSONResponse({
            "service": settings.observability.service_name,
            "version": settings.observability.build_version,
            "endpoints": {
                "health": "/health",
                "ready": "/ready",
                "metrics": "/metrics",
                "info": "/info",
                "alerts": "/alerts"
            }
        })

    return app
