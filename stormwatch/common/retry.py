"""
Retry utilities for StormWatch.

This module provides retry and backoff utilities for the
outbound publishing and upload adapters.
"""

import asyncio
import random
from typing import Awaitable, Callable, Tuple, Type, TypeVar

from stormwatch.observability.logging_setup import get_logger

log = get_logger("stormwatch.retry")

T = TypeVar('T')

async def retry_with_backoff(
    func: Callable[[], Awaitable[T]],
    max_retries: int = 3,
    base_delay: float = 1.0,
    max_delay: float = 60.0,
    jitter: bool = True,
    retry_on: Tuple[Type[BaseException], ...] = (Exception,),
) -> T:
    """
    지수 백오프와 함께 함수를 재시도합니다.

    Args:
        func: 재시도할 비동기 함수
        max_retries: 최대 재시도 횟수
        base_delay: 기본 지연 시간 (초)
        max_delay: 최대 지연 시간 (초)
        jitter: 지터 적용 여부
        retry_on: 재시도할 예외 유형

    Returns:
        함수 실행 결과

    Raises:
        마지막 시도에서 발생한 예외
    """
    for attempt in range(1, max_retries + 2):  # +2 because we try once + max_retries
        try:
            return await func()
        except retry_on as e:
            if attempt > max_retries:
                raise

            # 지연 계산
            delay = min(max_delay, base_delay * (2 ** (attempt - 1)))

            # 지터 적용
            if jitter:
                delay = delay * (0.5 + random.random() * 0.5)

            log.warning(f"재시도 대기 attempt:{attempt} delay:{delay:.2f}s error:{e}")
            await asyncio.sleep(delay)

    raise RuntimeError("unreachable")
