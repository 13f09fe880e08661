import importlib
import os
import sys


sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

from servicehub.auth import create_access_token, parse_bearer_token, verify_access_token
from servicehub.services.marketplace_store import MarketplaceStore


def test_auth_ttl_invalid_env_falls_back(monkeypatch):
    monkeypatch.setenv("AUTH_TOKEN_TTL_HOURS", "not-a-number")
    sys.modules.pop("servicehub.auth", None)
    auth = importlib.import_module("servicehub.auth")
    assert auth.TOKEN_TTL_HOURS == 24


def test_auth_ttl_non_positive_env_falls_back(monkeypatch):
    monkeypatch.setenv("AUTH_TOKEN_TTL_HOURS", "0")
    sys.modules.pop("servicehub.auth", None)
    auth = importlib.import_module("servicehub.auth")
    assert auth.TOKEN_TTL_HOURS == 24


def test_commission_rate_invalid_env_falls_back(monkeypatch):
    monkeypatch.setenv("COMMISSION_RATE", "ten percent")
    sys.modules.pop("servicehub.services.pricing", None)
    pricing = importlib.import_module("servicehub.services.pricing")
    assert pricing.COMMISSION_RATE == 0.10


def test_tampered_or_malformed_tokens_are_rejected():
    token, _ = create_access_token("client-1")
    assert verify_access_token(token) == "client-1"
    payload, sig = token.split(".", 1)
    assert verify_access_token(f"{payload}.{sig[:-2]}xx") is None
    assert verify_access_token("garbage") is None
    assert verify_access_token("%%%.###") is None
    assert parse_bearer_token("Token abc") is None
    assert parse_bearer_token("Bearer   ") is None


def test_fresh_store_does_not_share_state_with_singleton():
    store = MarketplaceStore()
    store.delete_user("client-2")
    assert store.get_user("client-2") is None
    other = MarketplaceStore()
    assert other.get_user("client-2") is not None
