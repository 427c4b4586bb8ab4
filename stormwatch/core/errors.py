"""
Pipeline error kinds for StormWatch.

Every failure the pipeline can report carries a stable ``kind`` string
that ends up in the published status artifact.
"""

from typing import Optional


class PipelineError(Exception):
    """파이프라인 오류 기본 클래스"""

    kind: str = "InternalError"

    def __init__(self, message: str, detail: Optional[str] = None):
        self.message = message
        self.detail = detail or message
        super().__init__(self.message)


class MalformedPayload(PipelineError):
    """내장 XML 페이로드를 해석할 수 없음"""

    kind = "MalformedPayload"


class InvalidCoordinateToken(PipelineError):
    """좌표 쌍에 숫자가 아닌 토큰이 포함됨"""

    kind = "InvalidCoordinateToken"


class DegenerateRing(PipelineError):
    """링을 구성할 고유 점이 부족함"""

    kind = "DegenerateRing"


class CatalogLoadError(PipelineError):
    """지역 경계 데이터셋 로드 실패 (치명적)"""

    kind = "CatalogLoadError"


class RegionGeometryError(PipelineError):
    """단일 지역의 교차 검사 실패 (복구 가능)"""

    kind = "RegionGeometryError"

    def __init__(self, name: str, code: str, message: str):
        self.name = name
        self.code = code
        super().__init__(message)


class UnsupportedInputFormat(PipelineError):
    """경보 컨테이너가 JSON이 아님"""

    kind = "UnsupportedInputFormat"


class InputUnavailable(PipelineError):
    """경보 원본을 읽을 수 없음 (파일 누락, 다운로드 실패 등)"""

    kind = "InputUnavailable"
