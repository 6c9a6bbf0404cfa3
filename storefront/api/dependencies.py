# storefront/api/dependencies.py
from fastapi import Depends, Header, HTTPException

from storefront.domain.errors import DomainError
from storefront.domain.identity import UserContext
from storefront.services.identity_client import IdentityClient
from storefront.services.lock_service import LockService

_lock_service: LockService | None = None


def get_identity_client() -> IdentityClient:
    return IdentityClient()


def get_lock_service() -> LockService:
    # jeden klient redis (pula polaczen) na proces
    global _lock_service
    if _lock_service is None:
        _lock_service = LockService()
    return _lock_service


def get_current_user(
    authorization: str | None = Header(None),
    identity: IdentityClient = Depends(get_identity_client),
) -> UserContext:
    """Bearer token -> UserContext; brak albo odrzucony token = anonim."""
    token = None
    if authorization and authorization.lower().startswith("bearer "):
        token = authorization[7:].strip()

    try:
        return identity.resolve(token)
    except DomainError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
