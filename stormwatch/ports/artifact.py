"""
Display artifact port interface.

This module defines the protocol for exporting the warning polygon
to the web map.
"""

from typing import Protocol
from stormwatch.core.models import WarningPolygon

class DisplayArtifactPort(Protocol):
    """표시용 산출물 포트 인터페이스"""
    
    async def export(self, polygon: WarningPolygon) -> None:
        """
        경고 폴리곤을 내보냅니다.
        
        Args:
            polygon: 경고 폴리곤
        """
        ...
