from urllib.parse import quote

import httpx
from fastapi import Response
from fastapi.responses import RedirectResponse

from app.config import settings
from app.utils.exceptions import InvalidRequest
from app.utils.logger import logger
from app.utils.s3_signer import S3UrlSigner

# Connection-scoped headers that must not be relayed
HOP_BY_HOP_HEADERS = {
    "connection",
    "keep-alive",
    "proxy-authenticate",
    "proxy-authorization",
    "te",
    "trailer",
    "transfer-encoding",
    "upgrade",
}


def build_content_disposition(object_path: str) -> str:
    """attachment disposition naming the last path segment, plain and RFC 5987 forms"""
    file_name = object_path.split("/")[-1]
    quoted_name = file_name.replace("\\", "\\\\").replace('"', '\\"')
    return f"attachment; filename=\"{quoted_name}\"; filename*=UTF-8''{quote(file_name, safe='')}"


class ObjectResponder:
    """Serves flat objects: signed download redirect for GET, metadata relay for HEAD"""

    def __init__(self, signer: S3UrlSigner, http_client: httpx.AsyncClient):
        self.signer = signer
        self.http_client = http_client

    async def respond(self, object_path: str, method: str) -> Response:
        method = method.upper()
        overrides = {"response-content-disposition": build_content_disposition(object_path)}

        if method == "HEAD":
            return await self._relay_head(object_path, overrides)
        if method == "GET":
            signed = self.signer.sign("GET", object_path, overrides, settings.download_url_expiry)
            logger.info(f"Redirecting GET {object_path} to signed download URL")
            return RedirectResponse(signed.url, status_code=302)
        raise InvalidRequest(f"Unsupported method: {method}")

    async def _relay_head(self, object_path: str, overrides) -> Response:
        signed = self.signer.sign("HEAD", object_path, overrides, settings.head_url_expiry)
        try:
            upstream = await self.http_client.head(signed.url)
        except httpx.HTTPError as e:
            logger.warning(f"HEAD relay failed for {object_path}, falling back to redirect: {str(e)}")
            fallback = self.signer.sign("HEAD", object_path, overrides, settings.download_url_expiry)
            response = RedirectResponse(fallback.url, status_code=307)
            response.headers["Access-Control-Allow-Origin"] = "*"
            response.headers["Access-Control-Expose-Headers"] = "*"
            return response

        # The gateway's own CORS policy replaces whatever the store sent
        headers = {
            name: value
            for name, value in upstream.headers.items()
            if name.lower() not in HOP_BY_HOP_HEADERS
            and not name.lower().startswith("access-control-")
        }

        if upstream.status_code != 200:
            logger.info(f"Upstream HEAD for {object_path} returned {upstream.status_code}, relaying as 200")
        response = Response(status_code=200, headers=headers)
        response.headers["Access-Control-Allow-Origin"] = "*"
        response.headers["Access-Control-Expose-Headers"] = "*"
        return response
