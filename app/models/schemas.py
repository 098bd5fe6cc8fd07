from datetime import datetime, timedelta, timezone
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional, List

PING_TOKEN = "ping"
SUPPORTED_METHODS = ("GET", "HEAD")


class TenantCredentials(BaseModel):
    """One entry of the ACCOUNTS_JSON tenant table"""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    access_key_id: str = Field(..., alias="accessKeyId", min_length=1)
    secret_access_key: str = Field(..., alias="secretAccessKey", min_length=1)
    account_id: str = Field(..., alias="accountId", min_length=1)
    bucket_name: str = Field(..., alias="bucketName", min_length=1)

    @field_validator('access_key_id', 'secret_access_key', 'account_id', 'bucket_name')
    @classmethod
    def value_not_blank(cls, v, info):
        v = v.strip()
        if not v:
            raise ValueError(f'{info.field_name} cannot be empty')
        return v


class ResolvedRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    account: Optional[str] = None  # only absent for liveness probes
    object_path: str = Field(..., min_length=1)
    method: str = "GET"

    @field_validator('method')
    @classmethod
    def method_upper(cls, v):
        return v.upper()

    @property
    def is_ping(self) -> bool:
        return self.object_path == PING_TOKEN

    @property
    def is_manifest(self) -> bool:
        return self.object_path.endswith(".m3u8")


class SignedURL(BaseModel):
    url: str
    method: str
    host: str  # Host header used at signing time
    expires_in: int
    signed_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def expires_at(self) -> datetime:
        return self.signed_at + timedelta(seconds=self.expires_in)


class RewrittenManifest(BaseModel):
    object_path: str
    body: str
    line_count: int
    signed_segments: int = 0
    passthrough_segments: List[str] = []  # absolute references left as-is
