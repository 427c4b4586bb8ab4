# stormwatch/settings.py
from __future__ import annotations
from pydantic import BaseModel, Field

class CatalogConfig(BaseModel):
    path: str = "data/sample_regions.geojson"
    name_property: str = "COM_NAME"
    code_property: str = "COM_CODE"

class DweetConfig(BaseModel):
    base_url: str = "https://dweet.io"
    thing: str = "PINLightningReport"
    timeout_sec: int = 10

class MqttCommon(BaseModel):
    host: str = "localhost"
    port: int = 1883
    username: str | None = None
    password: str | None = None
    tls: bool = False
    client_id: str | None = None
    keepalive: int = 30

class RemoteMQTT(MqttCommon):
    topic: str = "earthnetworks/alerts/#"
    qos: int = 1

class LocalMQTT(MqttCommon):
    topic_prefix: str = "stormwatch"
    qos: int = 1
    retain: bool = True

class S3Config(BaseModel):
    region_name: str | None = None
    endpoint_url: str | None = None

class ArtifactConfig(BaseModel):
    mode: str = "none"                        # none | file | s3
    path: str = "/tmp/stormWarningArea.js"
    bucket: str = "gis-earthnetworks"
    key: str = "stormWarningArea.js"
    acl: str = "public-read"
    variable: str = "stormArea"

class Observability(BaseModel):
    http_port: int = 8099
    metrics_enabled: bool = True
    service_name: str = "StormWatch"
    build_version: str = "0.2.0"
    build_date: str = "2025-01-01"
    log_level: str = "INFO"
    json_logs: bool = False

class Reliability(BaseModel):
    publish_max_retries: int = 3
    backoff_initial_sec: float = 0.5
    backoff_max_sec: float = 30.0
    max_report_bytes: int = 2000

class Settings(BaseModel):
    # 상위 플래그(옵션)
    dry_run: bool = False
    publisher: str = "dweet"                  # dweet | mqtt | console

    # 하위 섹션 (기본값/팩토리로 누락 방지)
    catalog: CatalogConfig = Field(default_factory=CatalogConfig)
    dweet: DweetConfig = Field(default_factory=DweetConfig)
    remote_mqtt: RemoteMQTT = Field(default_factory=RemoteMQTT)
    local_mqtt: LocalMQTT = Field(default_factory=LocalMQTT)
    s3: S3Config = Field(default_factory=S3Config)
    artifact: ArtifactConfig = Field(default_factory=ArtifactConfig)
    observability: Observability = Field(default_factory=Observability)
    reliability: Reliability = Field(default_factory=Reliability)
