import asyncio
from typing import List, Optional, Tuple

import httpx
from fastapi import Response

from app.config import settings
from app.models.schemas import RewrittenManifest
from app.utils.exceptions import UpstreamError, UpstreamNotFound
from app.utils.logger import logger
from app.utils.s3_signer import S3UrlSigner

MANIFEST_MEDIA_TYPE = "application/vnd.apple.mpegurl"


def base_directory(object_path: str) -> str:
    """Everything up to and including the last '/', or '' for a bare name."""
    last_slash = object_path.rfind("/")
    return object_path[: last_slash + 1] if last_slash != -1 else ""


def is_segment_reference(line: str, extensions: Tuple[str, ...]) -> bool:
    trimmed = line.strip()
    return bool(trimmed) and not trimmed.startswith("#") and trimmed.endswith(extensions)


class ManifestRewriter:
    """Fetches an HLS playlist and replaces every segment line with a signed URL"""

    def __init__(
        self,
        signer: S3UrlSigner,
        http_client: httpx.AsyncClient,
        max_concurrency: Optional[int] = None,
    ):
        self.signer = signer
        self.http_client = http_client
        self.extensions = tuple(settings.segment_extensions)
        self.max_concurrency = max(1, max_concurrency or settings.manifest_sign_concurrency)

    async def fetch_manifest(self, object_path: str) -> str:
        signed = self.signer.sign("GET", object_path, expires_in=settings.manifest_url_expiry)
        try:
            response = await self.http_client.get(signed.url)
        except httpx.HTTPError as e:
            logger.error(f"Manifest fetch failed for {object_path}: {str(e)}")
            raise UpstreamNotFound("M3U8 Not Found") from e

        if not response.is_success:
            logger.info(f"Manifest {object_path} not available upstream (status {response.status_code})")
            raise UpstreamNotFound("M3U8 Not Found")
        return response.text

    async def rewrite(self, object_path: str) -> RewrittenManifest:
        original_text = await self.fetch_manifest(object_path)
        return await self.rewrite_text(object_path, original_text)

    async def rewrite_text(self, object_path: str, original_text: str) -> RewrittenManifest:
        lines = original_text.split("\n")
        base_dir = base_directory(object_path)
        semaphore = asyncio.Semaphore(self.max_concurrency)
        rewritten: List[str] = list(lines)
        passthrough: List[str] = []
        pending = []

        for index, line in enumerate(lines):
            if not is_segment_reference(line, self.extensions):
                continue
            trimmed = line.strip()
            if trimmed.startswith("http"):
                # Already a full URL, not ours to sign
                rewritten[index] = trimmed
                passthrough.append(trimmed)
                continue
            pending.append(asyncio.ensure_future(
                self._sign_line(semaphore, rewritten, index, base_dir + trimmed)
            ))

        try:
            await asyncio.gather(*pending)
        except Exception as e:
            # Segments still waiting for a worker are not signed once one has failed
            for task in pending:
                task.cancel()
            if isinstance(e, UpstreamError):
                raise
            logger.error(f"Manifest rewrite failed for {object_path}: {str(e)}")
            raise UpstreamError(f"Manifest rewrite failed: {str(e)}") from e

        logger.info(
            f"Rewrote {object_path}: {len(lines)} lines, "
            f"{len(pending)} signed, {len(passthrough)} passed through"
        )
        return RewrittenManifest(
            object_path=object_path,
            body="\n".join(rewritten),
            line_count=len(rewritten),
            signed_segments=len(pending),
            passthrough_segments=passthrough,
        )

    async def _sign_line(self, semaphore: asyncio.Semaphore, results: List[str], index: int, segment_path: str):
        async with semaphore:
            signed = await asyncio.to_thread(
                self.signer.sign, "GET", segment_path, None, settings.segment_url_expiry
            )
        results[index] = signed.url


def manifest_response(manifest: RewrittenManifest) -> Response:
    return Response(
        content=manifest.body,
        media_type=MANIFEST_MEDIA_TYPE,
        headers={
            "Access-Control-Allow-Origin": "*",
            "Cache-Control": "no-cache",
        },
    )
