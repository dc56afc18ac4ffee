"""Tests for token verification and role checks."""

from conftest import make_token
import jwt
import pytest

from packages.common.auth import User, verify_jwt
from packages.common.config import get_settings
from packages.common.errors import Forbidden, Unauthorized
from packages.common.rbac import require_roles


@pytest.fixture
def audience(monkeypatch):
    monkeypatch.setenv("OIDC_AUDIENCE", "drills-api")
    get_settings.cache_clear()
    yield "drills-api"
    monkeypatch.delenv("OIDC_AUDIENCE")
    get_settings.cache_clear()


def test_verify_jwt_reads_claims() -> None:
    user = verify_jwt(make_token("u1", roles=["admin"], email="a@b.c", name="A"))
    assert user == User(sub="u1", email="a@b.c", name="A", roles=["admin"])


def test_verify_jwt_requires_sub() -> None:
    token = jwt.encode({"exp": 9999999999}, get_settings().JWT_VERIFY_KEY, algorithm="HS256")
    with pytest.raises(Unauthorized):
        verify_jwt(token)


def test_verify_jwt_requires_exp() -> None:
    token = jwt.encode({"sub": "u1"}, get_settings().JWT_VERIFY_KEY, algorithm="HS256")
    with pytest.raises(Unauthorized):
        verify_jwt(token)


def test_verify_jwt_rejects_wrong_key() -> None:
    token = jwt.encode({"sub": "u1", "exp": 9999999999}, "another-secret-key-of-sufficient-length-xyz", algorithm="HS256")
    with pytest.raises(Unauthorized):
        verify_jwt(token)


def test_verify_jwt_checks_audience_when_configured(audience) -> None:
    with pytest.raises(Unauthorized):
        verify_jwt(make_token("u1", aud="someone-else"))
    assert verify_jwt(make_token("u1", aud=audience)).sub == "u1"


def test_require_roles() -> None:
    check = require_roles("admin")
    admin = User(sub="a", roles=["admin", "editor"])
    assert check(admin) is admin
    with pytest.raises(Forbidden) as ei:
        check(User(sub="b", roles=["editor"]))
    assert ei.value.message == "Missing role: admin"
