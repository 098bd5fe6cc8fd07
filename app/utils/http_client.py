import httpx
from app.config import settings


def create_http_client() -> httpx.AsyncClient:
    """Outbound client for the object store. Redirects are not followed."""
    return httpx.AsyncClient(timeout=settings.upstream_timeout, follow_redirects=False)
