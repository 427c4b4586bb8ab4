"""
Observability 모듈 단위 테스트

이 모듈은 헬스 체크, 경보 제출 엔드포인트, 메트릭, 로깅 기능을 테스트합니다.
"""

import logging

import pytest
from fastapi.testclient import TestClient
from loguru import logger

from conftest import DISJOINT_POLYGON
from stormwatch.observability.health import create_app
from stormwatch.observability.logging_setup import InterceptHandler, get_logger, setup_logging
from stormwatch.observability.metrics import alerts_received, invocation_failures
from stormwatch.orchestrators.coordinator import PipelineCoordinator


class TestHealthEndpoints:
    """헬스 체크 엔드포인트 테스트"""

    @pytest.fixture
    def coordinator(self, region_catalog, publisher):
        return PipelineCoordinator(region_catalog, publisher)

    @pytest.fixture
    def client(self, sample_settings, coordinator):
        """테스트용 클라이언트"""
        return TestClient(create_app(sample_settings, coordinator))

    def test_health_endpoint(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert data["service"] == "test-service"

    def test_ready_endpoint(self, client):
        response = client.get("/ready")

        assert response.status_code == 200
        assert response.json()["regions"] == 3

    def test_not_ready_when_catalog_failed(self, sample_settings):
        """카탈로그 로드 실패 시 503"""
        client = TestClient(create_app(sample_settings, None, "Cannot read region dataset"))

        response = client.get("/ready")
        assert response.status_code == 503
        assert response.json()["reason"] == "Cannot read region dataset"

        response = client.post("/alerts", content=b"{}")
        assert response.status_code == 503

    def test_metrics_endpoint(self, client):
        response = client.get("/metrics")

        assert response.status_code == 200
        assert "stormwatch_uptime_seconds" in response.text

    def test_metrics_disabled(self, sample_settings, coordinator):
        sample_settings.observability.metrics_enabled = False
        client = TestClient(create_app(sample_settings, coordinator))
        assert client.get("/metrics").status_code == 503

    def test_info_endpoint(self, client):
        data = client.get("/info").json()

        assert data["service"] == "test-service"
        assert data["version"] == "1.0.0"
        assert data["publisher"] == "dweet"

    def test_root_endpoint(self, client):
        data = client.get("/").json()
        assert data["endpoints"]["alerts"] == "/alerts"


class TestAlertEndpoint:
    """경보 제출 엔드포인트 테스트"""

    @pytest.fixture
    def client(self, sample_settings, region_catalog, publisher):
        return TestClient(create_app(sample_settings, PipelineCoordinator(region_catalog, publisher)))

    def test_report_returned_and_published(self, client, publisher, alert_body):
        response = client.post("/alerts", content=alert_body())

        assert response.status_code == 200
        data = response.json()
        assert data["regionsAtRisk"] == 1
        assert data["matches"] == [{"name": "Chbar Ampov", "code": "120801"}]
        assert publisher.documents == [data]

    def test_no_regions_at_risk(self, client, alert_body):
        data = client.post("/alerts", content=alert_body(polygon=DISJOINT_POLYGON)).json()
        assert data["matches"] == [{"status": "no regions at risk"}]

    def test_failure_status(self, client, publisher):
        """실패해도 상태 레코드를 발송하고 422로 응답"""
        response = client.post("/alerts", content=b"not json")

        assert response.status_code == 422
        assert response.json()["errorKind"] == "UnsupportedInputFormat"
        assert len(publisher.payloads) == 1


class TestMetricsCollection:
    """메트릭 수집 테스트"""

    def test_alerts_received_counter(self):
        before = alerts_received.labels(source="http")._value.get()
        alerts_received.labels(source="http").inc()
        assert alerts_received.labels(source="http")._value.get() == before + 1

    def test_invocation_failures_counter(self):
        before = invocation_failures.labels(kind="DegenerateRing")._value.get()
        invocation_failures.labels(kind="DegenerateRing").inc()
        assert invocation_failures.labels(kind="DegenerateRing")._value.get() == before + 1


class TestLoggingSetup:
    """로깅 설정 테스트"""

    def test_intercept_handler_forwards_stdlib_records(self):
        """stdlib logging 레코드가 loguru로 전달된다"""
        messages = []
        sink_id = logger.add(messages.append, format="{message}", level="INFO")
        try:
            record = logging.LogRecord("uvicorn", logging.INFO, __file__, 1, "server started", None, None)
            InterceptHandler().emit(record)
        finally:
            logger.remove(sink_id)
        assert any("server started" in m for m in messages)

    def test_get_logger_binds_name(self):
        records = []
        sink_id = logger.add(lambda m: records.append(m.record), level="INFO")
        try:
            get_logger("stormwatch.test", alert="x").info("bound")
        finally:
            logger.remove(sink_id)
        assert records[-1]["extra"]["name"] == "stormwatch.test"
        assert records[-1]["extra"]["alert"] == "x"

    def test_setup_logging_json(self, capsys):
        setup_logging("INFO", json_logs=True)
        get_logger("stormwatch.test").info("json line")
        out = capsys.readouterr().out
        assert '"message": "json line"' in out
        setup_logging("INFO")
