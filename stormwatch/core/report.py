"""
Report assembly for StormWatch.

Builds the summary report published after each invocation. The
serialized report must fit the publishing service's payload ceiling,
so per-match detail is dropped before match entries are.
"""

import json
from datetime import datetime, timezone
from typing import Dict, List, Optional, Union

from stormwatch.core.models import (
    NO_RISK_STATUS,
    Alert,
    IntersectionResult,
    Report,
    StatusReport,
)

# dweet.io 페이로드 한도
MAX_REPORT_BYTES = 2000

# 한 필드가 예산을 독식하지 않도록 자르는 길이
MAX_FIELD_CHARS = 100
MAX_ENTRY_CHARS = 50


def utc_now_iso(now: Optional[datetime] = None) -> str:
    now = now or datetime.now(timezone.utc)
    return now.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _clip(value: Optional[str], limit: int) -> Optional[str]:
    if value is None or len(value) <= limit:
        return value
    return value[: limit - 3] + "..."


def serialize(report: Union[Report, StatusReport]) -> bytes:
    """보고서를 간결한 UTF-8 JSON으로 직렬화합니다."""
    data = report.model_dump(by_alias=True, exclude_none=True)
    return json.dumps(data, ensure_ascii=False, separators=(",", ":")).encode("utf-8", errors="replace")


def _fits(report: Union[Report, StatusReport], max_bytes: int) -> bool:
    return len(serialize(report)) <= max_bytes


def assemble_report(alert: Alert,
                    result: IntersectionResult,
                    *,
                    now: Optional[datetime] = None,
                    max_bytes: int = MAX_REPORT_BYTES) -> Report:
    """
    교차 결과로 보고서를 생성합니다.

    Args:
        alert: 원본 경보 (유형, 발령 시각)
        result: 교차 검사 결과
        now: 보고 시각 (None이면 현재 시각)
        max_bytes: 직렬화 크기 한도

    Returns:
        크기 한도를 넘지 않는 보고서
    """
    entries: List[Dict[str, str]] = [
        {"name": _clip(m.name, MAX_ENTRY_CHARS), "code": _clip(m.code, MAX_ENTRY_CHARS)}
        for m in result.matches
    ]
    if not entries:
        entries = [{"status": NO_RISK_STATUS}]

    report = Report(
        report_time_utc=utc_now_iso(now),
        alert_type=_clip(alert.alert_type_name, MAX_FIELD_CHARS),
        alert_issued_utc=_clip(alert.issued_at_utc, MAX_FIELD_CHARS),
        regions_analyzed=result.analyzed,
        regions_at_risk=len(result.matches),
        regions_skipped=len(result.skipped) or None,
        matches=entries,
    )
    if not result.matches or _fits(report, max_bytes):
        return report

    # 1단계: 지역 이름을 빼고 코드만 남긴다
    report.matches = [{"code": entry["code"]} for entry in entries]
    report.truncated = True
    report.omitted = 0
    if _fits(report, max_bytes):
        return report

    # 2단계: 뒤쪽 항목부터 생략 (최소 한 항목은 유지)
    while len(report.matches) > 1 and not _fits(report, max_bytes):
        report.matches.pop()
        report.omitted = len(entries) - len(report.matches)
    return report


def assemble_failure(kind: str,
                     message: str,
                     *,
                     alert: Optional[Alert] = None,
                     source: Optional[str] = None,
                     now: Optional[datetime] = None,
                     max_bytes: int = MAX_REPORT_BYTES) -> StatusReport:
    """
    실패 상태 레코드를 생성합니다. 한도를 넘으면 메시지를 자릅니다.
    """
    report = StatusReport(
        report_time_utc=utc_now_iso(now),
        error_kind=kind,
        message=message,
        source=_clip(source, MAX_FIELD_CHARS),
        alert_type=_clip(alert.alert_type_name, MAX_FIELD_CHARS) if alert else None,
        alert_issued_utc=_clip(alert.issued_at_utc, MAX_FIELD_CHARS) if alert else None,
    )
    while not _fits(report, max_bytes) and len(report.message) > 3:
        overflow = len(serialize(report)) - max_bytes
        keep = max(0, len(report.message) - max(overflow, 1) - 3)
        report.message = report.message[:keep] + "..."
    return report
