"""
Local MQTT publisher adapter for StormWatch.

This module publishes each report/status artifact to a local MQTT
broker topic, retrying with exponential backoff.
"""

import ssl

from aiomqtt import Client, MqttError

from stormwatch.common.retry import retry_with_backoff
from stormwatch.observability.logging_setup import get_logger

log = get_logger("stormwatch.mqtt_local")

class LocalMqttPublisher:
    """로컬 MQTT 발송 어댑터"""

    def __init__(self,
                 *,
                 broker_host: str,
                 broker_port: int,
                 topic_prefix: str,
                 username: str | None = None,
                 password: str | None = None,
                 tls: bool = False,
                 client_id: str | None = None,
                 keepalive: int = 30,
                 qos: int = 1,
                 retain: bool = True,
                 backoff_initial: float = 0.5,
                 backoff_max: float = 30.0,
                 max_retries: int = 3):
        """
        초기화합니다.

        Args:
            broker_host: MQTT 브로커 호스트
            broker_port: MQTT 브로커 포트
            topic_prefix: 토픽 접두사 (보고서는 {prefix}/report 로 발송)
            username: 사용자명
            password: 비밀번호
            tls: TLS 사용 여부
            client_id: 클라이언트 ID
            keepalive: keepalive 시간
            qos: QoS
            retain: retain 플래그 (최신 보고서를 유지)
            backoff_initial: 초기 백오프 시간
            backoff_max: 최대 백오프 시간
            max_retries: 최대 재시도 횟수
        """
        self.broker_host = broker_host
        self.broker_port = broker_port
        self.topic_prefix = topic_prefix.rstrip("/")
        self.username = username
        self.password = password
        self.tls = tls
        self.client_id = client_id
        self.keepalive = keepalive
        self.qos = qos
        self.retain = retain
        self.backoff_initial = backoff_initial
        self.backoff_max = backoff_max
        self.max_retries = max_retries

    @property
    def topic(self) -> str:
        return f"{self.topic_prefix}/report"

    def _client(self) -> Client:
        tls_context = ssl.create_default_context() if self.tls else None
        return Client(
            hostname=self.broker_host,
            port=self.broker_port,
            username=self.username,
            password=self.password,
            identifier=self.client_id,
            keepalive=self.keepalive,
            tls_context=tls_context,
        )

    async def publish(self, payload: bytes) -> None:
        """
        보고서를 발송합니다.

        Args:
            payload: 직렬화된 보고서
        """
        async def _publish():
            async with self._client() as client:
                await client.publish(self.topic, payload, qos=self.qos, retain=self.retain)

        await retry_with_backoff(
            _publish,
            max_retries=self.max_retries,
            base_delay=self.backoff_initial,
            max_delay=self.backoff_max,
            retry_on=(MqttError,),
        )
        log.info(f"보고서 발송 성공 topic:{self.topic} bytes:{len(payload)}")
