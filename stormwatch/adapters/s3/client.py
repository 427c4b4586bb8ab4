"""
S3 adapters for StormWatch.

This module handles the object-storage side of the Lambda trigger:
reading the bucket/key from a "new object" event, downloading the
alert, and uploading the display artifact for the web map.
"""

import asyncio
from typing import Any, AsyncIterator, Dict, Optional, Tuple
from urllib.parse import unquote_plus

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from stormwatch.common.retry import retry_with_backoff
from stormwatch.core.export import DEFAULT_VARIABLE, to_display_script
from stormwatch.core.models import AlertDelivery, WarningPolygon
from stormwatch.observability.logging_setup import get_logger

log = get_logger("stormwatch.s3")


def parse_s3_event(event: Dict[str, Any]) -> Tuple[str, str]:
    """
    S3 이벤트에서 버킷과 객체 키를 추출합니다.

    객체 키는 URL 인코딩되어 있으며 공백은 '+'로 전달됩니다.

    Raises:
        ValueError: 이벤트 형식이 올바르지 않은 경우
    """
    try:
        record = event["Records"][0]["s3"]
        bucket = record["bucket"]["name"]
        key = unquote_plus(record["object"]["key"])
    except (KeyError, IndexError, TypeError) as e:
        raise ValueError(f"Not an S3 object event: missing {e}")
    return bucket, key


def create_client(region_name: Optional[str] = None, endpoint_url: Optional[str] = None):
    return boto3.client("s3", region_name=region_name, endpoint_url=endpoint_url)


class S3ObjectSource:
    """S3 객체 경보 소스 (이벤트 1건 = 객체 1개)"""

    def __init__(self, client, bucket: str, key: str):
        self.client = client
        self.bucket = bucket
        self.key = key

    @property
    def source(self) -> str:
        return f"{self.bucket}/{self.key}"

    def _download(self) -> bytes:
        response = self.client.get_object(Bucket=self.bucket, Key=self.key)
        return response["Body"].read()

    async def recv(self) -> AsyncIterator[AlertDelivery]:
        try:
            body = await asyncio.to_thread(self._download)
        except (BotoCoreError, ClientError) as e:
            log.error(f"S3 객체 다운로드 실패 source:{self.source} error:{e}")
            yield AlertDelivery(source=self.source, name=self.key, error=f"Unable to download {self.source}: {e}")
            return
        log.info(f"S3 객체 다운로드 완료 source:{self.source} bytes:{len(body)}")
        yield AlertDelivery(source=self.source, name=self.key, body=body)


class S3ArtifactSink:
    """경고 구역 스크립트를 S3에 업로드"""

    def __init__(self,
                 client,
                 bucket: str,
                 key: str = "stormWarningArea.js",
                 *,
                 acl: Optional[str] = "public-read",
                 variable: str = DEFAULT_VARIABLE,
                 max_retries: int = 3,
                 backoff_initial: float = 0.5,
                 backoff_max: float = 30.0):
        self.client = client
        self.bucket = bucket
        self.key = key
        self.acl = acl
        self.variable = variable
        self.max_retries = max_retries
        self.backoff_initial = backoff_initial
        self.backoff_max = backoff_max

    def _upload(self, script: str) -> None:
        params = {
            "Bucket": self.bucket,
            "Key": self.key,
            "Body": script.encode("utf-8"),
            "ContentType": "application/javascript",
        }
        if self.acl:
            params["ACL"] = self.acl
        self.client.put_object(**params)

    async def export(self, polygon: WarningPolygon) -> None:
        script = to_display_script(polygon, self.variable)
        await retry_with_backoff(
            lambda: asyncio.to_thread(self._upload, script),
            max_retries=self.max_retries,
            base_delay=self.backoff_initial,
            max_delay=self.backoff_max,
            retry_on=(BotoCoreError, ClientError),
        )
        log.info(f"경고 구역 스크립트 업로드됨 s3://{self.bucket}/{self.key}")
