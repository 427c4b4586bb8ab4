"""
Logging setup for StormWatch.

loguru is the only logging backend. stdlib loggers (uvicorn, botocore,
aiohttp) are routed into it, and the pipeline binds the delivery source
so every line of one invocation can be correlated.
"""

from __future__ import annotations
import json
import logging
import sys
from loguru import logger

# 라이브러리 로거 → 최소 레벨
_LIBRARY_LEVELS = {
    "uvicorn": logging.INFO,
    "uvicorn.access": logging.WARNING,
    "botocore": logging.WARNING,
    "boto3": logging.WARNING,
    "aiohttp": logging.WARNING,
    "asyncio": logging.WARNING,
}

# JSON 로그에 그대로 싣는 extra 키 (name은 logger 필드로 따로 기록)
_JSON_SKIP_EXTRA = {"name"}

class InterceptHandler(logging.Handler):
    """stdlib logging 레코드를 loguru로 넘긴다"""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno
        logger.bind(name=record.name).opt(depth=6, exception=record.exc_info).log(level, record.getMessage())

def _route_stdlib_logging() -> None:
    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    for name, level in _LIBRARY_LEVELS.items():
        lib = logging.getLogger(name)
        lib.handlers = [InterceptHandler()]
        lib.setLevel(level)
        lib.propagate = False

def _json_sink(message) -> None:
    """CloudWatch 등에서 한 줄씩 읽기 좋은 간결한 JSON"""
    record = message.record
    line = {
        "time": record["time"].isoformat(),
        "level": record["level"].name,
        "logger": record["extra"].get("name", "stormwatch"),
        "message": record["message"],
    }
    line.update({k: v for k, v in record["extra"].items() if k not in _JSON_SKIP_EXTRA})
    if record["exception"] is not None:
        line["exception"] = repr(record["exception"].value)
    sys.stdout.write(json.dumps(line, ensure_ascii=False, default=str) + "\n")
    sys.stdout.flush()

# 콘솔 포맷: source는 파이프라인 호출 중에만 채워진다
DEV_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level:<7}</level> | "
    "<cyan>{extra[name]}</cyan> | "
    "<magenta>{extra[source]}</magenta> | "
    "<level>{message}</level>"
)

def setup_logging(log_level: str = "INFO", json_logs: bool = False) -> None:
    """
    loguru를 초기화합니다.

    Args:
        log_level: 최소 로그 레벨
        json_logs: True면 한 줄 JSON (Lambda), False면 컬러 콘솔
    """
    logger.remove()
    logger.configure(extra={"name": "stormwatch", "source": "-"})
    if json_logs:
        logger.add(_json_sink, level=log_level.upper(), backtrace=False, diagnose=False)
    else:
        logger.add(
            sink=lambda m: print(m, end=""),
            format=DEV_FORMAT,
            colorize=True,
            backtrace=True,
            diagnose=False,
            level=log_level.upper(),
        )
    _route_stdlib_logging()

def get_logger(name: str = "stormwatch", **ctx):
    """모듈 이름과 선택적 컨텍스트를 바인딩한 logger"""
    return logger.bind(name=name, **ctx)

def with_context(**ctx):
    """블록 안의 모든 로그에 컨텍스트를 붙인다 (예: 경보 출처)"""
    return logger.contextualize(**ctx)
