from fastapi import APIRouter, Request, Response
from fastapi.responses import PlainTextResponse

from app.services.manifest_rewriter import ManifestRewriter, manifest_response
from app.services.object_responder import ObjectResponder
from app.services.request_resolver import request_resolver
from app.utils.exceptions import ConfigurationError, GatewayError, InvalidRequest
from app.utils.logger import logger
from app.utils.s3_signer import S3UrlSigner

router = APIRouter(tags=["Gateway"])


def _raw_target(request: Request):
    """Undecoded path and query string, so decoding happens exactly once downstream"""
    raw_path = request.scope.get("raw_path")
    path = raw_path.decode("latin-1") if raw_path else request.url.path
    query = request.scope.get("query_string", b"").decode("latin-1")
    return path.split("?", 1)[0], query


def _tenant_registry(request: Request):
    registry = getattr(request.app.state, "tenant_registry", None)
    if registry is None:
        error = getattr(request.app.state, "config_error", None)
        raise error or ConfigurationError("Missing ACCOUNTS_JSON")
    return registry


@router.api_route("/{full_path:path}", methods=["GET", "HEAD"], include_in_schema=False)
async def handle_media_request(request: Request, full_path: str) -> Response:
    """
    Resolve the tenant and object, then rewrite playlists or hand out signed
    object URLs.
    """
    try:
        try:
            registry = _tenant_registry(request)
        except ConfigurationError as e:
            return PlainTextResponse(f"Config Error: {e.message}", status_code=e.status_code)

        raw_path, raw_query = _raw_target(request)
        resolved = request_resolver.resolve(raw_path, raw_query, request.method)
        if resolved.is_ping:
            return PlainTextResponse("Pong!", status_code=200)

        credentials = registry.lookup(resolved.account)
        if credentials is None:
            logger.info(f"Rejected request for unknown account {resolved.account!r}")
            raise InvalidRequest("Invalid Parameters")

        signer = S3UrlSigner(credentials)
        http_client = request.app.state.http_client

        if resolved.is_manifest:
            logger.info(f"Rewriting manifest {resolved.object_path} for account {resolved.account}")
            manifest = await ManifestRewriter(signer, http_client).rewrite(resolved.object_path)
            return manifest_response(manifest)

        return await ObjectResponder(signer, http_client).respond(resolved.object_path, resolved.method)

    except GatewayError as e:
        if e.status_code >= 500:
            logger.error(f"Gateway error: {e.message}")
        return PlainTextResponse(e.message, status_code=e.status_code)

    except Exception as e:
        logger.error(f"Error processing media request: {str(e)}")
        return PlainTextResponse(f"Error: {str(e)}", status_code=500)
