"""
Admin Schemas

Pydantic models for the admin gate and upload URL issuance.
"""
from pydantic import Field, field_validator

from audioshelf.schemas.base import CamelModel


# Content type prefix -> object key prefix
UPLOAD_PREFIXES = {
    "audio/": "audio",
    "image/": "covers",
}


class AdminLoginRequest(CamelModel):
    """管理员登录请求"""

    password: str = Field(..., min_length=1)


class UploadUrlRequest(CamelModel):
    """上传地址请求（仅允许音频和图片）"""

    filename: str = Field(..., min_length=1)
    content_type: str = Field(..., min_length=1)

    @field_validator("content_type")
    @classmethod
    def content_type_must_be_media(cls, value: str) -> str:
        if not any(value.startswith(p) for p in UPLOAD_PREFIXES):
            raise ValueError("Content type must be an audio or image format")
        return value

    @property
    def key_prefix(self) -> str:
        for content_prefix, key_prefix in UPLOAD_PREFIXES.items():
            if self.content_type.startswith(content_prefix):
                return key_prefix
        raise ValueError(f"Unsupported content type: {self.content_type}")


class UploadUrlResponse(CamelModel):
    """上传地址响应"""

    upload_url: str
    object_key: str
