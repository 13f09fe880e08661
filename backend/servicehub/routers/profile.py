from typing import Optional

from fastapi import APIRouter, Header, HTTPException, Query

from servicehub import data
from servicehub.auth import assert_actor_authorized
from servicehub.models import NavigationItem, ProfileUpdateRequest, ProfileView
from servicehub.routers.common import raise_store_http_error
from servicehub.services.marketplace_store import MarketplaceStoreError, marketplace_store

router = APIRouter(tags=["profile"])


@router.get("/profile", response_model=ProfileView)
def get_profile(
    user_id: str = Query(...),
    authorization: Optional[str] = Header(default=None),
):
    assert_actor_authorized(actor_user_id=user_id, authorization=authorization)
    try:
        user = marketplace_store.require_user(user_id)
    except MarketplaceStoreError as exc:
        raise_store_http_error(exc)
    return ProfileView(user=marketplace_store.public_user(user), stats=marketplace_store.profile_stats(user))


@router.put("/profile", response_model=ProfileView)
def update_profile(
    payload: ProfileUpdateRequest,
    authorization: Optional[str] = Header(default=None),
):
    assert_actor_authorized(actor_user_id=payload.user_id, authorization=authorization)
    try:
        user = marketplace_store.update_profile(payload.user_id, payload.model_dump(exclude={"user_id"}))
    except MarketplaceStoreError as exc:
        raise_store_http_error(exc)
    return ProfileView(user=marketplace_store.public_user(user), stats=marketplace_store.profile_stats(user))


@router.get("/navigation/{role}", response_model=list[NavigationItem])
def navigation(role: str):
    items = data.NAVIGATION.get(role.strip().lower())
    if items is None:
        raise HTTPException(status_code=404, detail="Unknown role")
    return [NavigationItem(**item) for item in items]
