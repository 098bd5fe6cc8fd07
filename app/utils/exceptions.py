from typing import Optional


class GatewayError(Exception):
    """Base error carrying the HTTP status the gateway answers with"""
    status_code: int = 500

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ConfigurationError(GatewayError):
    """Tenant configuration is missing or malformed. Not recoverable at runtime."""
    status_code = 500


class InvalidRequest(GatewayError):
    """Missing or invalid parameters, or an unknown account"""
    status_code = 400


class UpstreamNotFound(GatewayError):
    status_code = 404


class UpstreamError(GatewayError):
    """Signing or object store failure"""
    status_code = 500
