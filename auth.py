from fastapi import HTTPException, Request, Security, Depends
from fastapi.security.api_key import APIKeyHeader
from dataclasses import dataclass
from enum import Enum
import logging
import secrets
from typing import Optional

from config import Settings

logger = logging.getLogger(__name__)

api_key_header = APIKeyHeader(name="X-API-KEY", auto_error=False)


class Capability(str, Enum):
    """What an endpoint needs from the caller."""
    READ = "read"    # public, no key needed
    LIST = "list"    # any valid key
    WRITE = "write"  # upload/delete


@dataclass(frozen=True)
class Principal:
    name: str
    trust_level: str  # "admin" or "user"

    @property
    def is_admin(self) -> bool:
        return self.trust_level == "admin"


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def _matches(api_key: str, candidate: Optional[str]) -> bool:
    return bool(candidate) and secrets.compare_digest(api_key.encode(), candidate.encode())


def verify_api_key(api_key: Optional[str], settings: Settings) -> Optional[Principal]:
    """Resolve an API key to a principal, or None when it is unknown"""
    if not api_key:
        return None

    # Master key from the environment
    if _matches(api_key, settings.API_KEY):
        return Principal(name="system", trust_level="admin")

    for index, user_key in enumerate(settings.USER_API_KEYS):
        if _matches(api_key, user_key):
            return Principal(name=f"user-{index}", trust_level="user")

    return None


def get_current_principal(
    api_key: Optional[str] = Security(api_key_header),
    settings: Settings = Depends(get_settings),
) -> Principal:
    """Get current principal from API key"""
    principal = verify_api_key(api_key, settings)
    if not principal:
        raise HTTPException(
            status_code=401,
            detail="Invalid API key",
            headers={"WWW-Authenticate": "ApiKey"},
        )
    return principal


def can(principal: Principal, capability: Capability, settings: Settings) -> bool:
    if capability in (Capability.READ, Capability.LIST):
        return True
    return principal.is_admin or settings.ALLOW_NON_ADMIN_UPLOADS


def require(capability: Capability):
    """Dependency factory enforcing ``capability`` for a route.

    READ needs nothing; everything else first authenticates the caller.
    """
    if capability is Capability.READ:
        def allow_anonymous() -> None:
            return None
        return allow_anonymous

    def check(
        principal: Principal = Depends(get_current_principal),
        settings: Settings = Depends(get_settings),
    ) -> Principal:
        if not can(principal, capability, settings):
            logger.warning("Principal %s denied %s", principal.name, capability.value)
            raise HTTPException(status_code=403, detail="Admin access required")
        return principal

    return check
