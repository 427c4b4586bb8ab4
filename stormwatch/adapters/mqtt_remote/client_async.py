import asyncio
import ssl
from typing import AsyncIterator

from aiomqtt import Client, MqttError

from stormwatch.core.models import AlertDelivery
from stormwatch.observability.logging_setup import get_logger

log = get_logger("stormwatch.mqtt_remote")

class RemoteMqttIngestor:
    """원격 MQTT 수집 어댑터"""

    def __init__(
        self,
        host: str,
        port: int,
        topic: str,
        *,
        username: str | None = None,
        password: str | None = None,
        tls: bool = False,
        client_id: str | None = None,
        keepalive: int = 30,
        qos: int = 1,
        reconnect_delay_sec: float = 5.0,
    ):
        self.host = host
        self.port = port
        self.topic = topic
        self.username = username
        self.password = password
        self.tls = tls
        self.client_id = client_id
        self.keepalive = keepalive
        self.qos = qos
        self.reconnect_delay_sec = reconnect_delay_sec

        self._running = False

    def _client(self) -> Client:
        # TLS 컨텍스트 준비 (필요 시)
        tls_context = ssl.create_default_context() if self.tls else None
        return Client(
            hostname=self.host,
            port=self.port,
            username=self.username,
            password=self.password,
            identifier=self.client_id,
            keepalive=self.keepalive,
            tls_context=tls_context,
        )

    async def recv(self) -> AsyncIterator[AlertDelivery]:
        """
        구독한 토픽의 메시지를 경보 원본으로 전달합니다.

        연결이 끊기면 reconnect_delay_sec 후 다시 연결합니다.
        """
        self._running = True
        while self._running:
            try:
                async with self._client() as client:
                    await client.subscribe(self.topic, qos=self.qos)
                    log.info(f"토픽 구독됨: {self.topic}")

                    async for message in client.messages:
                        if not self._running:
                            break
                        payload = message.payload
                        if isinstance(payload, str):
                            payload = payload.encode("utf-8")
                        elif not isinstance(payload, (bytes, bytearray)):
                            log.error(f"지원하지 않는 페이로드 형식: {type(payload).__name__}")
                            continue
                        yield AlertDelivery(source=f"mqtt:{message.topic}", body=bytes(payload))

            except MqttError as e:
                log.error(f"MQTT 오류: {e}")
                if self._running:
                    await asyncio.sleep(self.reconnect_delay_sec)  # 재연결 대기

    async def stop(self) -> None:
        self._running = False
        log.info("MQTT 수집 중지됨")
