from typing import Dict, Optional
from urllib.parse import quote

from botocore.auth import S3SigV4QueryAuth
from botocore.awsrequest import AWSRequest
from botocore.credentials import Credentials
from botocore.exceptions import BotoCoreError

from app.config import settings
from app.models.schemas import SignedURL, TenantCredentials
from app.utils.exceptions import UpstreamError
from app.utils.logger import logger


def encode_object_path(object_path: str) -> str:
    """Percent-encode every path segment on its own, keeping the '/' separators."""
    return "/".join(quote(segment, safe="") for segment in object_path.split("/"))


def storage_host(credentials: TenantCredentials) -> str:
    return f"{credentials.account_id}.{settings.storage_domain}"


class S3UrlSigner:
    def __init__(self, credentials: TenantCredentials):
        self.host = storage_host(credentials)
        self.bucket_name = credentials.bucket_name
        self._aws_credentials = Credentials(
            access_key=credentials.access_key_id,
            secret_key=credentials.secret_access_key,
        )

    def object_url(self, object_path: str) -> str:
        return (
            f"{settings.storage_scheme}://{self.host}/"
            f"{quote(self.bucket_name, safe='')}/{encode_object_path(object_path)}"
        )

    def sign(
        self,
        method: str,
        object_path: str,
        query: Optional[Dict[str, str]] = None,
        expires_in: int = 3600,
    ) -> SignedURL:
        """
        Generate a query-signed URL for `object_path` that any HTTP client can
        use without extra headers. Valid for `expires_in` seconds.
        """
        method = method.upper()
        request = AWSRequest(
            method=method,
            url=self.object_url(object_path),
            headers={"Host": self.host},
            params=dict(query or {}),
        )
        try:
            auth = S3SigV4QueryAuth(
                self._aws_credentials,
                settings.storage_service,
                settings.storage_region,
                expires=int(expires_in),
            )
            auth.add_auth(request)
        except BotoCoreError as e:
            logger.error(f"S3 presigned URL generation failed for {object_path}: {str(e)}")
            raise UpstreamError(f"Signing failed: {str(e)}") from e

        logger.debug(f"Signed {method} {object_path} for {expires_in}s")
        return SignedURL(url=request.url, method=method, host=self.host, expires_in=int(expires_in))
