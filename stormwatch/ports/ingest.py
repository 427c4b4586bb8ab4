"""
Alert source port interface.

This module defines the protocol for alert sources.
"""

from typing import AsyncIterator, Protocol
from stormwatch.core.models import AlertDelivery

class AlertSourcePort(Protocol):
    """경보 소스 포트 인터페이스"""
    
    def recv(self) -> AsyncIterator[AlertDelivery]:
        """
        경보 원본을 비동기적으로 수신합니다.
        
        Yields:
            AlertDelivery (출처, 이름, 본문)
        """
        ...
