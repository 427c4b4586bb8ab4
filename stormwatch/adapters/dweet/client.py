"""
Dweet client for StormWatch.

This module posts serialized reports to the dweet.io key/value
service, which keeps the latest payload for 24 hours and rejects
payloads larger than 2000 characters.
"""

import asyncio

import aiohttp

from stormwatch.common.retry import retry_with_backoff
from stormwatch.observability.logging_setup import get_logger

log = get_logger("stormwatch.dweet")

# dweet.io 페이로드 한도
DWEET_MAX_BYTES = 2000

class DweetPublisher:
    """dweet.io 보고서 발송 어댑터"""

    def __init__(self,
                 thing: str,
                 *,
                 base_url: str = "https://dweet.io",
                 timeout: int = 10,
                 max_retries: int = 3,
                 backoff_initial: float = 0.5,
                 backoff_max: float = 30.0):
        """
        초기화합니다.

        Args:
            thing: dweet thing 이름
            base_url: dweet 서비스 기본 URL
            timeout: 요청 타임아웃 (초)
            max_retries: 최대 재시도 횟수
            backoff_initial: 초기 백오프 시간
            backoff_max: 최대 백오프 시간
        """
        self.thing = thing
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.max_retries = max_retries
        self.backoff_initial = backoff_initial
        self.backoff_max = backoff_max

    @property
    def post_url(self) -> str:
        return f"{self.base_url}/dweet/for/{self.thing}"

    @property
    def latest_url(self) -> str:
        return f"{self.base_url}/get/latest/dweet/for/{self.thing}"

    async def publish(self, payload: bytes) -> None:
        """
        보고서를 dweet으로 발송합니다.

        Args:
            payload: 직렬화된 보고서 (2000바이트 이하)

        Raises:
            ValueError: 페이로드가 한도를 넘는 경우
            aiohttp.ClientError: 재시도 후에도 발송에 실패한 경우
        """
        if len(payload) > DWEET_MAX_BYTES:
            raise ValueError(f"dweet payload is {len(payload)} bytes, limit is {DWEET_MAX_BYTES}")

        async def _post():
            async with aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout)
            ) as session:
                async with session.post(
                    self.post_url,
                    data=payload,
                    headers={"Content-Type": "application/json"},
                ) as response:
                    response.raise_for_status()
                    return await response.json(content_type=None)

        body = await retry_with_backoff(
            _post,
            max_retries=self.max_retries,
            base_delay=self.backoff_initial,
            max_delay=self.backoff_max,
            retry_on=(aiohttp.ClientError, asyncio.TimeoutError),
        )

        if isinstance(body, dict) and body.get("this") == "failed":
            raise aiohttp.ClientError(f"dweet rejected payload: {body.get('because')}")

        log.info(f"dweet 발송 완료, 결과 확인: {self.latest_url}")
