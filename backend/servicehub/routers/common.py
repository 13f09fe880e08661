from typing import NoReturn, Optional

from fastapi import HTTPException

from servicehub.auth import assert_actor_authorized
from servicehub.models import User
from servicehub.services.marketplace_store import (
    MarketplaceStoreConflictError,
    MarketplaceStoreError,
    MarketplaceStoreNotFoundError,
    MarketplaceStorePermissionError,
    UserFormError,
    marketplace_store,
)


def raise_store_http_error(exc: MarketplaceStoreError) -> NoReturn:
    if isinstance(exc, UserFormError):
        raise HTTPException(status_code=422, detail={"message": str(exc), "errors": exc.errors})
    if isinstance(exc, MarketplaceStoreNotFoundError):
        raise HTTPException(status_code=404, detail=str(exc))
    if isinstance(exc, MarketplaceStorePermissionError):
        raise HTTPException(status_code=403, detail=str(exc))
    if isinstance(exc, MarketplaceStoreConflictError):
        raise HTTPException(status_code=409, detail=str(exc))
    raise HTTPException(status_code=400, detail=str(exc))


def authorize_role(user_id: str, role: str, authorization: Optional[str]) -> User:
    """Check the bearer token against ``user_id`` and that the user acts in ``role``."""
    assert_actor_authorized(actor_user_id=user_id, authorization=authorization)
    try:
        return marketplace_store.require_role(user_id, role)
    except MarketplaceStoreError as exc:
        raise_store_http_error(exc)
