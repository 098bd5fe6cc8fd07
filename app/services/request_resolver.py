"""
Request addressing.

Two conventions name the same object:

    /?video=<object-path>&acc=<account>
    /<account>/<object-path...>

Each convention is a strategy; strategies are tried in a fixed order and the
first one yielding both an account and an object path wins. The liveness
token ``ping`` short-circuits resolution before an account is required.
"""
from typing import List, Optional, Tuple
from urllib.parse import parse_qs, unquote

from app.models.schemas import PING_TOKEN, SUPPORTED_METHODS, ResolvedRequest
from app.utils.exceptions import InvalidRequest
from app.utils.logger import logger

Candidate = Tuple[Optional[str], Optional[str]]  # (account, object_path)


class QueryParameterStrategy:
    name = "query"

    def extract(self, raw_path: str, raw_query: str) -> Candidate:
        params = parse_qs(raw_query, keep_blank_values=True)
        account = params.get("acc", [None])[0]
        video = params.get("video", [None])[0]
        return account or None, video or None


class PathSegmentStrategy:
    name = "path"

    def extract(self, raw_path: str, raw_query: str) -> Candidate:
        parts = raw_path.lstrip("/").split("/", 1)
        account = unquote(parts[0]) if parts[0] else None
        rest = parts[1] if len(parts) > 1 else ""
        return account, unquote(rest) or None


DEFAULT_STRATEGIES = (QueryParameterStrategy(), PathSegmentStrategy())


def validate_object_path(object_path: str) -> str:
    """Reject paths that could escape the bucket namespace"""
    if object_path.startswith("/"):
        raise InvalidRequest("Invalid Parameters: absolute object path")
    if any(segment in (".", "..") for segment in object_path.split("/")):
        raise InvalidRequest("Invalid Parameters: relative path segments are not allowed")
    return object_path


class RequestResolver:
    def __init__(self, strategies=DEFAULT_STRATEGIES):
        self.strategies: List = list(strategies)

    def resolve(self, raw_path: str, raw_query: str, method: str = "GET") -> ResolvedRequest:
        """
        Resolve (account, object path, method) from the undecoded request path
        and query string. Every value is percent-decoded exactly once.
        """
        for strategy in self.strategies:
            account, object_path = strategy.extract(raw_path or "/", raw_query or "")

            if object_path == PING_TOKEN:
                return ResolvedRequest(account=account, object_path=PING_TOKEN, method=method)

            if account and object_path:
                if method.upper() not in SUPPORTED_METHODS:
                    raise InvalidRequest(f"Unsupported method: {method}")
                validate_object_path(object_path)
                logger.debug(f"Resolved via {strategy.name} strategy: acc={account} path={object_path}")
                return ResolvedRequest(account=account, object_path=object_path, method=method)

        raise InvalidRequest("Invalid Parameters")


request_resolver = RequestResolver()
