# stormwatch/main.py
import os, sys, asyncio, signal, argparse
from typing import List, Optional
import uvicorn
from stormwatch.settings import Settings
from stormwatch.core.catalog import load_catalog
from stormwatch.core.errors import CatalogLoadError
from stormwatch.observability.health import create_app
from stormwatch.observability.logging_setup import setup_logging, get_logger
from stormwatch.adapters.files import FileArtifactSink, LocalFileSource
from stormwatch.adapters.s3 import S3ArtifactSink, create_client
from stormwatch.adapters.dweet import DweetPublisher
from stormwatch.adapters.console import ConsolePublisher
from stormwatch.adapters.mqtt_remote.client_async import RemoteMqttIngestor
from stormwatch.adapters.mqtt_local.publisher_async import LocalMqttPublisher
from stormwatch.orchestrators.coordinator import PipelineCoordinator
from stormwatch.ports.artifact import DisplayArtifactPort
from stormwatch.ports.publish import ReportPublisherPort

log = get_logger("stormwatch.main")

def _b(name, default=False): return os.getenv(name, str(default)).lower() in ("1","true","yes","on")

def build_settings() -> Settings:
    s = Settings()
    # 플래그
    s.dry_run = _b("DRY_RUN", s.dry_run)
    s.publisher = os.getenv("PUBLISHER", s.publisher)

    # 카탈로그
    s.catalog.path = os.getenv("CATALOG_PATH", s.catalog.path)
    s.catalog.name_property = os.getenv("CATALOG_NAME_PROPERTY", s.catalog.name_property)
    s.catalog.code_property = os.getenv("CATALOG_CODE_PROPERTY", s.catalog.code_property)

    # DWEET
    s.dweet.base_url = os.getenv("DWEET_BASE_URL", s.dweet.base_url)
    s.dweet.thing = os.getenv("DWEET_THING", s.dweet.thing)
    s.dweet.timeout_sec = int(os.getenv("DWEET_TIMEOUT_SEC", s.dweet.timeout_sec))

    # REMOTE MQTT
    s.remote_mqtt.host = os.getenv("REMOTE_MQTT_HOST", s.remote_mqtt.host)
    s.remote_mqtt.port = int(os.getenv("REMOTE_MQTT_PORT", s.remote_mqtt.port))
    s.remote_mqtt.username = os.getenv("REMOTE_MQTT_USERNAME", s.remote_mqtt.username)
    s.remote_mqtt.password = os.getenv("REMOTE_MQTT_PASSWORD", s.remote_mqtt.password)
    s.remote_mqtt.client_id = os.getenv("REMOTE_MQTT_CLIENT_ID", s.remote_mqtt.client_id)
    s.remote_mqtt.keepalive = int(os.getenv("REMOTE_MQTT_KEEPALIVE", s.remote_mqtt.keepalive))
    s.remote_mqtt.tls = _b("REMOTE_MQTT_TLS", s.remote_mqtt.tls)
    s.remote_mqtt.topic = os.getenv("REMOTE_MQTT_TOPIC", s.remote_mqtt.topic)

    # LOCAL MQTT
    s.local_mqtt.host  = os.getenv("LOCAL_MQTT_HOST", s.local_mqtt.host)
    s.local_mqtt.port  = int(os.getenv("LOCAL_MQTT_PORT", s.local_mqtt.port))
    s.local_mqtt.username = os.getenv("LOCAL_MQTT_USERNAME", s.local_mqtt.username)
    s.local_mqtt.password = os.getenv("LOCAL_MQTT_PASSWORD", s.local_mqtt.password)
    s.local_mqtt.tls = _b("LOCAL_MQTT_TLS", s.local_mqtt.tls)
    s.local_mqtt.topic_prefix = os.getenv("LOCAL_MQTT_TOPIC_PREFIX", s.local_mqtt.topic_prefix)

    # 산출물
    s.artifact.mode = os.getenv("ARTIFACT_MODE", s.artifact.mode)
    s.artifact.path = os.getenv("ARTIFACT_PATH", s.artifact.path)
    s.artifact.bucket = os.getenv("ARTIFACT_BUCKET", s.artifact.bucket)
    s.artifact.key = os.getenv("ARTIFACT_KEY", s.artifact.key)
    s.s3.region_name = os.getenv("AWS_REGION", s.s3.region_name)
    s.s3.endpoint_url = os.getenv("S3_ENDPOINT_URL", s.s3.endpoint_url)

    # 관측성
    s.observability.metrics_enabled = _b("METRICS_ENABLED", s.observability.metrics_enabled)
    s.observability.http_port = int(os.getenv("HTTP_PORT", s.observability.http_port))
    s.observability.log_level = os.getenv("LOG_LEVEL", s.observability.log_level)
    s.observability.json_logs = _b("JSON_LOGS", s.observability.json_logs)

    # 신뢰성
    s.reliability.publish_max_retries = int(os.getenv("PUBLISH_MAX_RETRIES", s.reliability.publish_max_retries))

    return s

def build_publisher(s: Settings) -> ReportPublisherPort:
    """설정에 맞는 보고서 발송 어댑터를 생성합니다."""
    if s.dry_run or s.publisher == "console":
        return ConsolePublisher()
    if s.publisher == "mqtt":
        return LocalMqttPublisher(
            broker_host=s.local_mqtt.host,
            broker_port=s.local_mqtt.port,
            topic_prefix=s.local_mqtt.topic_prefix,
            username=s.local_mqtt.username,
            password=s.local_mqtt.password,
            tls=s.local_mqtt.tls,
            client_id=s.local_mqtt.client_id,
            keepalive=s.local_mqtt.keepalive,
            qos=s.local_mqtt.qos,
            retain=s.local_mqtt.retain,
            backoff_initial=s.reliability.backoff_initial_sec,
            backoff_max=s.reliability.backoff_max_sec,
            max_retries=s.reliability.publish_max_retries,
        )
    if s.publisher == "dweet":
        return DweetPublisher(
            s.dweet.thing,
            base_url=s.dweet.base_url,
            timeout=s.dweet.timeout_sec,
            max_retries=s.reliability.publish_max_retries,
            backoff_initial=s.reliability.backoff_initial_sec,
            backoff_max=s.reliability.backoff_max_sec,
        )
    raise ValueError(f"Unknown publisher '{s.publisher}' (expected dweet, mqtt or console)")

def build_artifact_sink(s: Settings, s3_client=None) -> Optional[DisplayArtifactPort]:
    """설정에 맞는 표시용 산출물 어댑터를 생성합니다 (none이면 None)."""
    mode = s.artifact.mode
    if mode == "none" or s.dry_run:
        return None
    if mode == "file":
        return FileArtifactSink(s.artifact.path, s.artifact.variable)
    if mode == "s3":
        client = s3_client or create_client(s.s3.region_name, s.s3.endpoint_url)
        return S3ArtifactSink(
            client,
            s.artifact.bucket,
            s.artifact.key,
            acl=s.artifact.acl or None,
            variable=s.artifact.variable,
            max_retries=s.reliability.publish_max_retries,
            backoff_initial=s.reliability.backoff_initial_sec,
            backoff_max=s.reliability.backoff_max_sec,
        )
    raise ValueError(f"Unknown artifact mode '{mode}' (expected none, file or s3)")

def build_coordinator(s: Settings, s3_client=None) -> PipelineCoordinator:
    """카탈로그를 로드하고 조정자를 생성합니다. 카탈로그 실패는 CatalogLoadError로 전파됩니다."""
    catalog = load_catalog(
        s.catalog.path,
        name_property=s.catalog.name_property,
        code_property=s.catalog.code_property,
    )
    log.info(f"지역 카탈로그 로드 완료 regions:{len(catalog)} path:{s.catalog.path}")
    return PipelineCoordinator(
        catalog,
        build_publisher(s),
        artifact_sink=build_artifact_sink(s, s3_client),
        max_report_bytes=s.reliability.max_report_bytes,
    )

async def run_files(s: Settings, paths: List[str]) -> int:
    coordinator = build_coordinator(s)
    summary = await coordinator.run(LocalFileSource(paths))
    return 1 if summary.failed or summary.unpublished else 0

async def run_mqtt(s: Settings) -> int:
    coordinator = build_coordinator(s)
    ingest = RemoteMqttIngestor(
        host=s.remote_mqtt.host,
        port=s.remote_mqtt.port,
        topic=s.remote_mqtt.topic,
        username=s.remote_mqtt.username,
        password=s.remote_mqtt.password,
        tls=s.remote_mqtt.tls,
        client_id=s.remote_mqtt.client_id,
        keepalive=s.remote_mqtt.keepalive,
        qos=s.remote_mqtt.qos,
        reconnect_delay_sec=s.reliability.backoff_initial_sec * 10,
    )
    log.info("원격 MQTT 인게스터 생성 완료")

    http_task = None
    if s.observability.metrics_enabled:
        app = create_app(s, coordinator)
        http_task = asyncio.create_task(uvicorn.Server(
            uvicorn.Config(app, host="0.0.0.0", port=s.observability.http_port, log_level="info")
        ).serve())
        log.info("HTTP 서버 시작됨")

    run_task = asyncio.create_task(coordinator.run(ingest))
    stop = asyncio.Future()
    try:
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGTERM, signal.SIGINT):
            try: loop.add_signal_handler(sig, lambda: (not stop.done()) and stop.set_result(True))
            except NotImplementedError: pass
    except RuntimeError: pass

    await asyncio.wait([run_task, stop], return_when=asyncio.FIRST_COMPLETED)
    await ingest.stop()
    run_task.cancel()
    if http_task: http_task.cancel()
    return 0

async def run_serve(s: Settings) -> int:
    coordinator, catalog_error = None, None
    try:
        coordinator = build_coordinator(s)
    except CatalogLoadError as e:
        # /ready가 503을 반환하도록 서버는 계속 띄운다
        log.error(f"카탈로그 로드 실패: {e.message}")
        catalog_error = e.message
    app = create_app(s, coordinator, catalog_error)
    await uvicorn.Server(
        uvicorn.Config(app, host="0.0.0.0", port=s.observability.http_port, log_level="info")
    ).serve()
    return 0

def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="stormwatch", description="Lightning alert area analysis")
    sub = parser.add_subparsers(dest="mode", required=True)
    p_file = sub.add_parser("file", help="process alert JSON files in order")
    p_file.add_argument("paths", nargs="+", help="alert files (*.json)")
    sub.add_parser("mqtt", help="consume alerts from the remote MQTT broker")
    sub.add_parser("serve", help="run the HTTP app (POST /alerts)")
    parser.add_argument("--catalog", help="region boundary GeoJSON (overrides CATALOG_PATH)")
    parser.add_argument("--publisher", choices=["dweet", "mqtt", "console"], help="report publisher")
    parser.add_argument("--dry-run", action="store_true", help="log reports instead of publishing")
    return parser.parse_args(argv)

def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    s = build_settings()
    if args.catalog: s.catalog.path = args.catalog
    if args.publisher: s.publisher = args.publisher
    if args.dry_run: s.dry_run = True

    setup_logging(s.observability.log_level, s.observability.json_logs)
    log.info(f"설정 로드 완료 mode:{args.mode} publisher:{s.publisher} dry_run:{s.dry_run}")

    try:
        if args.mode == "file":
            return asyncio.run(run_files(s, args.paths))
        if args.mode == "mqtt":
            return asyncio.run(run_mqtt(s))
        return asyncio.run(run_serve(s))
    except CatalogLoadError as e:
        log.critical(f"카탈로그 로드 실패, 종료합니다: {e.message}")
        return 2

if __name__ == "__main__":
    sys.exit(main())
