"""
Pipeline coordinator for StormWatch.

This module sequences the pipeline stages for one alert delivery
(read -> extract -> build -> intersect -> report) and guarantees that
every invocation, successful or not, publishes exactly one artifact.
"""

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, List, Optional, Tuple, Union

from stormwatch.core.alert import parse_alert
from stormwatch.core.catalog import RegionCatalog
from stormwatch.core.errors import InputUnavailable, PipelineError
from stormwatch.core.extract import extract_coordinate_pairs
from stormwatch.core.intersect import find_intersections
from stormwatch.core.models import Alert, AlertDelivery, IntersectionResult, Report, StatusReport
from stormwatch.core.polygon import build_warning_polygon
from stormwatch.core.report import MAX_REPORT_BYTES, assemble_failure, assemble_report, serialize
from stormwatch.observability import metrics
from stormwatch.observability.logging_setup import get_logger, with_context
from stormwatch.ports.artifact import DisplayArtifactPort
from stormwatch.ports.ingest import AlertSourcePort
from stormwatch.ports.publish import ReportPublisherPort

log = get_logger("stormwatch.coordinator")


class PipelineState(str, Enum):
    IDLE = "Idle"
    READING = "Reading"
    EXTRACTING = "Extracting"
    BUILDING = "Building"
    INTERSECTING = "Intersecting"
    REPORTING = "Reporting"
    DONE = "Done"
    FAILED = "Failed"


@dataclass
class StageResult:
    """단계 실행 결과 (값 또는 오류)"""
    value: Any = None
    error: Optional[PipelineError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class PipelineOutcome:
    """호출 1건의 최종 결과"""
    state: PipelineState
    artifact: Union[Report, StatusReport]
    payload: bytes
    published: bool
    error_kind: Optional[str] = None
    trace: List[PipelineState] = field(default_factory=list)


@dataclass
class RunSummary:
    processed: int = 0
    failed: int = 0
    unpublished: int = 0


def _source_kind(source: str) -> str:
    if source.startswith("mqtt:"):
        return "mqtt"
    if source == "http":
        return "http"
    return "file"


def _read(delivery: AlertDelivery) -> Alert:
    if delivery.error:
        raise InputUnavailable(delivery.error)
    return parse_alert(delivery.body, delivery.name)


class PipelineCoordinator:
    """경보 1건 처리 파이프라인 조정자"""

    def __init__(self,
                 catalog: RegionCatalog,
                 publisher: ReportPublisherPort,
                 *,
                 artifact_sink: Optional[DisplayArtifactPort] = None,
                 max_report_bytes: int = MAX_REPORT_BYTES):
        """
        초기화합니다.

        Args:
            catalog: 지역 카탈로그 (읽기 전용, 호출 간 공유)
            publisher: 보고서 발송 포트
            artifact_sink: 표시용 산출물 포트 (없으면 내보내지 않음)
            max_report_bytes: 보고서 크기 한도
        """
        self.catalog = catalog
        self.publisher = publisher
        self.artifact_sink = artifact_sink
        self.max_report_bytes = max_report_bytes
        metrics.catalog_size.set(len(catalog))

    def _attempt(self, trace: List[PipelineState], stage: PipelineState,
                 func: Callable[..., Any], *args) -> StageResult:
        trace.append(stage)
        with metrics.stage_seconds.labels(stage=stage.value).time():
            try:
                return StageResult(value=func(*args))
            except PipelineError as e:
                return StageResult(error=e)
            except Exception as e:
                log.exception(f"{stage.value} 단계에서 예상치 못한 오류")
                return StageResult(error=PipelineError(f"Unexpected error while {stage.value.lower()}: {e}"))

    async def process(self, delivery: AlertDelivery) -> PipelineOutcome:
        """
        경보 1건을 처리하고 보고서 또는 상태 레코드를 발송합니다.

        Args:
            delivery: 경보 원본

        Returns:
            최종 상태, 발송한 산출물, 발송 성공 여부
        """
        with with_context(source=delivery.source):
            t0 = time.perf_counter()
            metrics.alerts_received.labels(source=_source_kind(delivery.source)).inc()
            try:
                return await self._process(delivery)
            finally:
                metrics.end_to_end_seconds.observe(time.perf_counter() - t0)

    async def _process(self, delivery: AlertDelivery) -> PipelineOutcome:
        trace = [PipelineState.IDLE]

        res = self._attempt(trace, PipelineState.READING, _read, delivery)
        if not res.ok:
            return await self._fail(res.error, trace, source=delivery.source)
        alert: Alert = res.value
        log.info(f"Earth Networks 경보 수신 type:{alert.alert_type} name:{alert.alert_type_name}")

        res = self._attempt(trace, PipelineState.EXTRACTING, extract_coordinate_pairs, alert.raw_message)
        if not res.ok:
            return await self._fail(res.error, trace, alert=alert, source=delivery.source)

        res = self._attempt(trace, PipelineState.BUILDING, build_warning_polygon, res.value)
        if not res.ok:
            return await self._fail(res.error, trace, alert=alert, source=delivery.source)
        polygon = res.value
        await self._export(polygon)

        res = self._attempt(trace, PipelineState.INTERSECTING, find_intersections, polygon, self.catalog)
        if not res.ok:
            return await self._fail(res.error, trace, alert=alert, source=delivery.source)
        result = res.value
        if result.skipped:
            metrics.regions_skipped.inc(len(result.skipped))
        metrics.regions_at_risk.observe(len(result.matches))

        res = self._attempt(trace, PipelineState.REPORTING, self._build_report, alert, result)
        if not res.ok:
            return await self._fail(res.error, trace, alert=alert, source=delivery.source)
        report, payload = res.value
        published = await self._publish(payload, status="ok")

        trace.append(PipelineState.DONE)
        if report.regions_at_risk:
            log.warning(f"위험 지역 {report.regions_at_risk}곳 / 분석 {report.regions_analyzed}곳")
        else:
            log.info(f"위험 지역 없음 / 분석 {report.regions_analyzed}곳")
        return PipelineOutcome(
            state=PipelineState.DONE,
            artifact=report,
            payload=payload,
            published=published,
            trace=trace,
        )

    def _build_report(self, alert: Alert, result: IntersectionResult) -> Tuple[Report, bytes]:
        report = assemble_report(alert, result, max_bytes=self.max_report_bytes)
        return report, serialize(report)

    async def _fail(self,
                    error: PipelineError,
                    trace: List[PipelineState],
                    *,
                    alert: Optional[Alert] = None,
                    source: Optional[str] = None) -> PipelineOutcome:
        trace.append(PipelineState.FAILED)
        log.error(f"경보 처리 실패 kind:{error.kind} message:{error.message}")
        metrics.invocation_failures.labels(kind=error.kind).inc()

        status = assemble_failure(
            error.kind,
            error.message,
            alert=alert,
            source=source,
            max_bytes=self.max_report_bytes,
        )
        payload = serialize(status)
        published = await self._publish(payload, status="failed")
        return PipelineOutcome(
            state=PipelineState.FAILED,
            artifact=status,
            payload=payload,
            published=published,
            error_kind=error.kind,
            trace=trace,
        )

    async def publish_failure(self, error: PipelineError, *, source: Optional[str] = None) -> PipelineOutcome:
        """파이프라인 밖(이벤트 해석 등)에서 발생한 실패를 발송합니다."""
        return await self._fail(error, [PipelineState.IDLE], source=source)

    async def _publish(self, payload: bytes, *, status: str) -> bool:
        try:
            await self.publisher.publish(payload)
        except Exception as e:
            log.error(f"보고서 발송 실패 status:{status} error:{e}")
            metrics.publish_failures.labels(status=status).inc()
            return False
        metrics.reports_published.labels(status=status).inc()
        return True

    async def _export(self, polygon) -> None:
        if self.artifact_sink is None:
            return
        try:
            await self.artifact_sink.export(polygon)
        except Exception as e:
            log.error(f"경고 구역 산출물 내보내기 실패 error:{e}")
            metrics.artifact_exports.labels(result="error").inc()
            return
        metrics.artifact_exports.labels(result="ok").inc()

    async def run(self, source: AlertSourcePort) -> RunSummary:
        """
        소스의 모든 경보를 순서대로 처리합니다.

        Returns:
            처리 건수 요약
        """
        summary = RunSummary()
        async for delivery in source.recv():
            outcome = await self.process(delivery)
            summary.processed += 1
            if outcome.state is PipelineState.FAILED:
                summary.failed += 1
            if not outcome.published:
                summary.unpublished += 1
        log.info(f"처리 완료 processed:{summary.processed} failed:{summary.failed}")
        return summary
