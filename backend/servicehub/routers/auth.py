import logging

from fastapi import APIRouter, Depends, HTTPException

from servicehub.auth import create_access_token, require_authenticated_user
from servicehub.models import AuthLoginRequest, AuthLoginResponse, AuthSignupRequest, PublicUser
from servicehub.routers.common import raise_store_http_error
from servicehub.services.marketplace_store import MarketplaceStoreError, marketplace_store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/signup", response_model=PublicUser)
def signup(payload: AuthSignupRequest):
    try:
        user = marketplace_store.signup(
            email=payload.email,
            password=payload.password,
            full_name=payload.full_name,
            role=payload.role,
        )
    except MarketplaceStoreError as exc:
        raise_store_http_error(exc)
    return marketplace_store.public_user(user)


@router.post("/login", response_model=AuthLoginResponse)
def login(payload: AuthLoginRequest):
    if not payload.email.strip():
        raise HTTPException(status_code=400, detail="email is required")
    try:
        user = marketplace_store.authenticate(email=payload.email, password=payload.password)
    except MarketplaceStoreError as exc:
        raise_store_http_error(exc)
    if not user:
        logger.warning("Failed login for %s", payload.email.strip().lower())
        raise HTTPException(status_code=401, detail="Invalid credentials")
    token, expires_at = create_access_token(user_id=user.id)
    return AuthLoginResponse(access_token=token, user=marketplace_store.public_user(user), expires_at=expires_at)


@router.get("/me", response_model=PublicUser)
def me(user_id: str = Depends(require_authenticated_user)):
    user = marketplace_store.get_user(user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return marketplace_store.public_user(user)
