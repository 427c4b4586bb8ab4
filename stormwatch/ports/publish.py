"""
Report publisher port interface.

This module defines the protocol for publishing reports.
"""

from typing import Protocol

class ReportPublisherPort(Protocol):
    """보고서 발송 포트 인터페이스"""
    
    async def publish(self, payload: bytes) -> None:
        """
        직렬화된 보고서 또는 상태 레코드를 발송합니다.
        
        Args:
            payload: UTF-8 JSON 페이로드 (크기 한도 이내)
        """
        ...
