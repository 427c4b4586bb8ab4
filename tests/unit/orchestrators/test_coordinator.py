"""
Pipeline Coordinator 단위 테스트

이 모듈은 파이프라인 조정자가 단계를 순서대로 실행하고
호출마다 정확히 하나의 산출물을 발송하는지 테스트합니다.
"""

import json
from unittest.mock import AsyncMock, patch

import pytest

from conftest import DISJOINT_POLYGON, RecordingPublisher, cap_message
from stormwatch.core.models import AlertDelivery, Report, StatusReport
from stormwatch.orchestrators.coordinator import PipelineCoordinator, PipelineState


def delivery(body: bytes, name: str = "alert.json") -> AlertDelivery:
    return AlertDelivery(source=f"test/{name}", name=name, body=body)


class ListSource:
    """고정 목록을 전달하는 테스트용 소스"""

    def __init__(self, deliveries):
        self.deliveries = deliveries

    async def recv(self):
        for d in self.deliveries:
            yield d


class TestProcess:
    """단일 호출 처리 테스트"""

    @pytest.fixture
    def coordinator(self, region_catalog, publisher):
        return PipelineCoordinator(region_catalog, publisher)

    @pytest.mark.asyncio
    async def test_success_publishes_report(self, coordinator, publisher, alert_body):
        outcome = await coordinator.process(delivery(alert_body()))

        assert outcome.state is PipelineState.DONE
        assert outcome.published is True
        assert outcome.error_kind is None
        assert isinstance(outcome.artifact, Report)
        assert outcome.trace == [
            PipelineState.IDLE, PipelineState.READING, PipelineState.EXTRACTING,
            PipelineState.BUILDING, PipelineState.INTERSECTING, PipelineState.REPORTING,
            PipelineState.DONE,
        ]
        assert publisher.payloads == [outcome.payload]
        doc = publisher.documents[0]
        assert doc["regionsAtRisk"] == 1
        assert doc["matches"] == [{"name": "Chbar Ampov", "code": "120801"}]

    @pytest.mark.asyncio
    async def test_no_regions_at_risk(self, coordinator, publisher, alert_body):
        outcome = await coordinator.process(delivery(alert_body(polygon=DISJOINT_POLYGON)))

        assert outcome.state is PipelineState.DONE
        assert publisher.documents[0]["matches"] == [{"status": "no regions at risk"}]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body,name,kind", [
        (b"not json", "alert.json", "UnsupportedInputFormat"),
        (b"{}", "alert.txt", "UnsupportedInputFormat"),
        (b'{"AlertType": 3}', "alert.json", "MalformedPayload"),
    ])
    async def test_read_failures(self, coordinator, publisher, body, name, kind):
        outcome = await coordinator.process(delivery(body, name))

        assert outcome.state is PipelineState.FAILED
        assert outcome.error_kind == kind
        assert outcome.trace == [PipelineState.IDLE, PipelineState.READING, PipelineState.FAILED]
        assert len(publisher.payloads) == 1
        doc = publisher.documents[0]
        assert doc["status"] == "failed"
        assert doc["errorKind"] == kind
        assert doc["source"] == f"test/{name}"

    @pytest.mark.asyncio
    async def test_unreadable_delivery(self, coordinator, publisher):
        outcome = await coordinator.process(
            AlertDelivery(source="missing.json", name="missing.json", error="Cannot read missing.json")
        )
        assert outcome.error_kind == "InputUnavailable"
        assert publisher.documents[0]["message"] == "Cannot read missing.json"

    @pytest.mark.asyncio
    async def test_extract_failure_keeps_alert_metadata(self, coordinator, publisher, alert_body):
        """추출 실패 상태 레코드에도 경보 정보가 남는다"""
        outcome = await coordinator.process(delivery(alert_body(polygon="12.3 abc, 1 2, 3 4")))

        assert outcome.error_kind == "InvalidCoordinateToken"
        assert outcome.trace[-2] is PipelineState.EXTRACTING
        doc = publisher.documents[0]
        assert doc["alertType"] == "Dangerous Thunderstorm"
        assert doc["alertIssuedUtc"] == "2019-05-14T09:12:00Z"

    @pytest.mark.asyncio
    async def test_degenerate_ring(self, coordinator, publisher, alert_body):
        outcome = await coordinator.process(delivery(alert_body(polygon="11.5 104.9, 11.6 105.0")))

        assert outcome.error_kind == "DegenerateRing"
        assert outcome.trace[-2] is PipelineState.BUILDING
        assert len(publisher.payloads) == 1

    @pytest.mark.asyncio
    async def test_multiple_polygons(self, coordinator, publisher, alert_body):
        raw = cap_message("1 2, 3 4, 5 6", "7 8, 9 10, 11 12")
        outcome = await coordinator.process(delivery(alert_body(raw_message=raw)))
        assert outcome.error_kind == "MalformedPayload"

    @pytest.mark.asyncio
    async def test_unexpected_error_is_internal(self, coordinator, publisher, alert_body):
        """예상치 못한 예외도 상태 레코드로 발송"""
        with patch("stormwatch.orchestrators.coordinator.find_intersections",
                   side_effect=RuntimeError("boom")):
            outcome = await coordinator.process(delivery(alert_body()))

        assert outcome.state is PipelineState.FAILED
        assert outcome.error_kind == "InternalError"
        assert "boom" in publisher.documents[0]["message"]

    @pytest.mark.asyncio
    async def test_report_stage_error_publishes_status(self, coordinator, publisher, alert_body):
        """보고서 조립 중 예외도 상태 레코드 1건으로 끝난다"""
        with patch("stormwatch.orchestrators.coordinator.assemble_report",
                   side_effect=RuntimeError("boom")):
            outcome = await coordinator.process(delivery(alert_body()))

        assert outcome.state is PipelineState.FAILED
        assert outcome.error_kind == "InternalError"
        assert outcome.trace[-2:] == [PipelineState.REPORTING, PipelineState.FAILED]
        assert len(publisher.payloads) == 1
        assert publisher.documents[0]["status"] == "failed"

    @pytest.mark.asyncio
    async def test_publish_failure_is_reported_not_raised(self, region_catalog, alert_body):
        publisher = RecordingPublisher(fail=True)
        coordinator = PipelineCoordinator(region_catalog, publisher)

        outcome = await coordinator.process(delivery(alert_body()))

        assert outcome.state is PipelineState.DONE
        assert outcome.published is False
        assert len(publisher.payloads) == 1

    @pytest.mark.asyncio
    async def test_payload_within_limit(self, region_catalog, publisher, alert_body):
        coordinator = PipelineCoordinator(region_catalog, publisher, max_report_bytes=2000)
        huge = "x" * 10000
        await coordinator.process(delivery(alert_body(AlertTypeName=huge)))
        await coordinator.process(delivery(huge.encode()))
        assert all(len(p) <= 2000 for p in publisher.payloads)


class TestArtifactExport:
    """표시용 산출물 내보내기 테스트"""

    @pytest.mark.asyncio
    async def test_exports_after_build(self, region_catalog, publisher, alert_body):
        sink = AsyncMock()
        coordinator = PipelineCoordinator(region_catalog, publisher, artifact_sink=sink)

        await coordinator.process(delivery(alert_body()))

        sink.export.assert_awaited_once()
        polygon = sink.export.await_args.args[0]
        assert polygon.ring[0] == (104.85, 11.45)

    @pytest.mark.asyncio
    async def test_export_failure_does_not_change_report(self, region_catalog, publisher, alert_body):
        """내보내기 실패는 보고서에 영향을 주지 않는다"""
        sink = AsyncMock()
        sink.export.side_effect = OSError("read-only file system")
        coordinator = PipelineCoordinator(region_catalog, publisher, artifact_sink=sink)

        outcome = await coordinator.process(delivery(alert_body()))

        assert outcome.state is PipelineState.DONE
        assert publisher.documents[0]["regionsAtRisk"] == 1

    @pytest.mark.asyncio
    async def test_no_export_when_build_fails(self, region_catalog, publisher, alert_body):
        sink = AsyncMock()
        coordinator = PipelineCoordinator(region_catalog, publisher, artifact_sink=sink)

        await coordinator.process(delivery(alert_body(polygon="1 2, 3 4")))

        sink.export.assert_not_awaited()


class TestRun:
    """소스 전체 처리 테스트"""

    @pytest.mark.asyncio
    async def test_one_artifact_per_delivery(self, region_catalog, publisher, alert_body):
        coordinator = PipelineCoordinator(region_catalog, publisher)
        source = ListSource([
            delivery(alert_body(), "a.json"),
            delivery(b"garbage", "b.json"),
            delivery(alert_body(polygon=DISJOINT_POLYGON), "c.json"),
        ])

        summary = await coordinator.run(source)

        assert summary.processed == 3
        assert summary.failed == 1
        assert summary.unpublished == 0
        assert [d.get("status") for d in publisher.documents] == [None, "failed", None]

    @pytest.mark.asyncio
    async def test_publish_failure_helper(self, region_catalog, publisher):
        from stormwatch.core.errors import UnsupportedInputFormat

        coordinator = PipelineCoordinator(region_catalog, publisher)
        outcome = await coordinator.publish_failure(UnsupportedInputFormat("bad event"), source="s3-event")

        assert isinstance(outcome.artifact, StatusReport)
        assert json.loads(outcome.payload)["errorKind"] == "UnsupportedInputFormat"
        assert len(publisher.payloads) == 1
