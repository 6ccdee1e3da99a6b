"""
Authenticator unit tests.

Verifies:
1. Token round trip and expiry
2. Rejection of tampered / foreign tokens
3. Admin credential check and face matching
"""

from datetime import timedelta

import pytest
from jose import jwt

from attendify.core.exceptions import Unauthorized
from attendify.core.security import (ROLE_ADMIN, ROLE_EMPLOYEE, AuthConfig, Authenticator,
                                     ExactFaceMatcher, Identity, pwd_context)

SECRET = "unit-test-secret"


@pytest.fixture(scope="module")
def auth() -> Authenticator:
    config = AuthConfig(
        secret_key=SECRET,
        algorithm="HS256",
        employee_token_ttl=timedelta(days=7),
        admin_token_ttl=timedelta(hours=24),
        admin_username="root",
        admin_password_hash=pwd_context.hash("s3cret"),
    )
    return Authenticator(config)


def test_employee_token_round_trip(auth: Authenticator):
    identity = Identity(subject="7", role=ROLE_EMPLOYEE, employee_id="EMP-7")
    assert auth.identify(auth.issue_token(identity)) == identity


def test_token_lifetimes_depend_on_role(auth: Authenticator):
    employee = jwt.get_unverified_claims(
        auth.issue_token(Identity(subject="1", role=ROLE_EMPLOYEE, employee_id="E"))
    )
    admin = jwt.get_unverified_claims(auth.issue_token(Identity(subject="admin", role=ROLE_ADMIN)))
    # 7 days vs 24 hours, allowing a little clock slack
    assert employee["exp"] - admin["exp"] > 5 * 24 * 3600


def test_expired_token_is_rejected(auth: Authenticator):
    token = auth.issue_token(
        Identity(subject="1", role=ROLE_EMPLOYEE, employee_id="E"),
        expires_delta=timedelta(seconds=-1),
    )
    with pytest.raises(Unauthorized):
        auth.identify(token)


def test_token_signed_with_other_key_is_rejected(auth: Authenticator):
    forged = jwt.encode(
        {"sub": "1", "role": ROLE_ADMIN, "type": "access"}, "not-the-secret", algorithm="HS256"
    )
    with pytest.raises(Unauthorized):
        auth.identify(forged)


@pytest.mark.parametrize(
    "claims",
    [
        {"sub": "1", "role": ROLE_ADMIN, "type": "refresh"},
        {"role": ROLE_ADMIN, "type": "access"},
        {"sub": "1", "role": "superuser", "type": "access"},
        {"sub": "1", "role": ROLE_EMPLOYEE, "type": "access"},
    ],
)
def test_malformed_claims_are_rejected(auth: Authenticator, claims):
    with pytest.raises(Unauthorized):
        auth.identify(jwt.encode(claims, SECRET, algorithm="HS256"))


def test_garbage_token_is_rejected(auth: Authenticator):
    with pytest.raises(Unauthorized):
        auth.identify("not.a.jwt")


def test_verify_admin(auth: Authenticator):
    identity = auth.verify_admin("root", "s3cret")
    assert identity.is_admin
    with pytest.raises(Unauthorized):
        auth.verify_admin("root", "wrong")
    with pytest.raises(Unauthorized):
        auth.verify_admin("admin", "s3cret")


def test_password_hashing(auth: Authenticator):
    hashed = auth.hash_password("hunter2")
    assert hashed != "hunter2"
    assert auth.verify_password("hunter2", hashed)
    assert not auth.verify_password("hunter3", hashed)
    assert not auth.verify_password("hunter2", None)


def test_exact_face_matcher():
    candidates = [("EMP-1", "data:image/png;base64,AAAA"), ("EMP-2", "data:image/png;base64,BBBB")]
    matcher = ExactFaceMatcher()
    assert matcher.match("data:image/png;base64,BBBB", candidates) == "EMP-2"
    assert matcher.match("data:image/png;base64,CCCC", candidates) is None


def test_verify_face_uses_injected_matcher():
    class AlwaysFirst:
        def match(self, sample, candidates):
            return next(iter(candidates))[0]

    config = AuthConfig(
        secret_key=SECRET,
        algorithm="HS256",
        employee_token_ttl=timedelta(days=7),
        admin_token_ttl=timedelta(hours=24),
        admin_username="root",
        admin_password_hash="",
    )
    auth = Authenticator(config, face_matcher=AlwaysFirst())
    assert auth.verify_face("anything", [("EMP-9", "x")]) == "EMP-9"
    assert auth.verify_face("", [("EMP-9", "x")]) is None
