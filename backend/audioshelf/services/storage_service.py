"""
对象存储服务

封装 S3（或兼容 S3 的存储）的预签名上传/读取地址与删除操作。
音频和封面的字节从不经过本服务，浏览器直接使用预签名地址读写。
"""
import logging
import random
import re
import string
import time
from typing import Optional

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from audioshelf.config import (
    S3_REGION,
    S3_ENDPOINT,
    S3_BUCKET,
    S3_ACCESS_KEY_ID,
    S3_SECRET_ACCESS_KEY,
    PLAY_URL_TTL,
    UPLOAD_URL_TTL,
)
from audioshelf.exceptions import UpstreamFailure

logger = logging.getLogger(__name__)

_UNSAFE_KEY_CHARS = re.compile(r"[^a-zA-Z0-9.-]")
_BASE36 = string.digits + string.ascii_lowercase


def generate_object_key(filename: str, prefix: str = "audio") -> str:
    """
    生成不冲突的对象 key。

    格式: "{prefix}/{毫秒时间戳}-{6 位 base36 随机串}-{清理后的文件名}"，
    文件名中 [A-Za-z0-9.-] 以外的字符替换为 "_"。

    Args:
        filename: 原始文件名
        prefix: key 前缀（audio / covers）

    Returns:
        str: 对象 key
    """
    timestamp = int(time.time() * 1000)
    suffix = "".join(random.choices(_BASE36, k=6))
    sanitized = _UNSAFE_KEY_CHARS.sub("_", filename)
    return f"{prefix}/{timestamp}-{suffix}-{sanitized}"


class ObjectStorage:
    """
    对象存储服务

    负责：
    1. 生成预签名上传地址（PUT）
    2. 生成预签名读取地址（GET，播放/封面）
    3. 尽力删除对象（失败只记录日志）
    """

    def __init__(self, client=None, bucket: Optional[str] = None):
        """
        初始化对象存储服务

        Args:
            client: boto3 S3 client（测试时可注入 mock）
            bucket: 存储桶名称，默认读取配置
        """
        self.bucket = bucket or S3_BUCKET
        self.client = client or boto3.client(
            "s3",
            region_name=S3_REGION,
            endpoint_url=S3_ENDPOINT,
            aws_access_key_id=S3_ACCESS_KEY_ID,
            aws_secret_access_key=S3_SECRET_ACCESS_KEY,
            config=Config(signature_version="s3v4"),
        )

    def presign_upload(self, object_key: str, content_type: str, ttl: int = UPLOAD_URL_TTL) -> str:
        """生成限时上传地址"""
        return self._presign(
            "put_object",
            {"Bucket": self.bucket, "Key": object_key, "ContentType": content_type},
            ttl,
        )

    def presign_read(self, object_key: str, ttl: int = PLAY_URL_TTL) -> str:
        """生成限时读取地址（音频默认 300 秒）"""
        return self._presign(
            "get_object",
            {"Bucket": self.bucket, "Key": object_key},
            ttl,
        )

    def delete(self, object_key: str) -> bool:
        """
        尽力删除对象。

        Returns:
            bool: 删除成功返回 True，失败记录日志并返回 False
        """
        try:
            self.client.delete_object(Bucket=self.bucket, Key=object_key)
            logger.info(f"[ObjectStorage] Deleted object: {object_key}")
            return True
        except (BotoCoreError, ClientError) as e:
            logger.warning(f"[ObjectStorage] Failed to delete object {object_key}: {e}")
            return False

    def _presign(self, operation: str, params: dict, ttl: int) -> str:
        try:
            return self.client.generate_presigned_url(
                ClientMethod=operation,
                Params=params,
                ExpiresIn=ttl,
            )
        except (BotoCoreError, ClientError) as e:
            logger.error(f"[ObjectStorage] Failed to presign {operation} for {params['Key']}: {e}")
            raise UpstreamFailure(f"Object storage unavailable: {e}") from e
