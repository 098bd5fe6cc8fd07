from typing import List, Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Tenant Configuration
    accounts_json: Optional[str] = None  # {"<acc>": {"accessKeyId", "secretAccessKey", "accountId", "bucketName"}}

    # Object Store Configuration
    storage_scheme: str = "https"
    storage_domain: str = "r2.cloudflarestorage.com"
    storage_region: str = "auto"
    storage_service: str = "s3"

    # Signed URL lifetimes (seconds)
    manifest_url_expiry: int = 3600  # fetched by the gateway itself
    segment_url_expiry: int = 14400  # handed to players
    download_url_expiry: int = 14400
    head_url_expiry: int = 3600

    # Manifest Rewriting
    segment_extensions: List[str] = [".ts", ".m4s", ".mp4"]
    manifest_sign_concurrency: int = 32

    # Outbound HTTP
    upstream_timeout: float = 10.0

    # Application Settings
    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
