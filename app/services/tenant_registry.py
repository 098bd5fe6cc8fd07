from types import MappingProxyType
from typing import Dict, Mapping, Optional

from pydantic import TypeAdapter, ValidationError

from app.config import settings
from app.models.schemas import TenantCredentials
from app.utils.exceptions import ConfigurationError
from app.utils.logger import logger

_accounts_adapter = TypeAdapter(Dict[str, TenantCredentials])


class TenantRegistry:
    """Read-only account -> credentials table, built once per process"""

    def __init__(self, entries: Mapping[str, TenantCredentials]):
        self._entries = MappingProxyType(dict(entries))

    @classmethod
    def from_json(cls, raw: Optional[str]) -> "TenantRegistry":
        if raw is None or not raw.strip():
            raise ConfigurationError("Missing ACCOUNTS_JSON")
        try:
            entries = _accounts_adapter.validate_json(raw)
        except ValidationError as e:
            # Keep secrets out of the message: report locations only
            locations = ", ".join(
                ".".join(str(part) for part in err["loc"]) or "<root>"
                for err in e.errors()
            )
            raise ConfigurationError(f"Malformed ACCOUNTS_JSON ({locations})") from e
        return cls(entries)

    def lookup(self, account: Optional[str]) -> Optional[TenantCredentials]:
        if account is None:
            return None
        return self._entries.get(account)

    def __len__(self) -> int:
        return len(self._entries)


def load_tenant_registry(raw: Optional[str] = None) -> TenantRegistry:
    """Build the registry from ACCOUNTS_JSON. Raises ConfigurationError."""
    if raw is None:
        raw = settings.accounts_json
    registry = TenantRegistry.from_json(raw)
    logger.info(f"Loaded tenant configuration for {len(registry)} account(s)")
    return registry
