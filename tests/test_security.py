from datetime import datetime, timedelta, timezone
from uuid import uuid4

import jwt

from chirper.config import ACCESS_TOKEN_AUDIENCE, TOKEN_ISSUER, get_settings
from chirper.core.security import (
    RefreshTokenPayload,
    TokenPayload,
    create_access_token,
    create_refresh_token,
    extract_bearer_token,
    hash_password,
    verify_access_token,
    verify_password,
    verify_refresh_token,
)


def _payload() -> TokenPayload:
    return TokenPayload(profile_id=uuid4(), username="alice_dev", email="alice@example.com")


def test_access_token_round_trip():
    payload = _payload()
    assert verify_access_token(create_access_token(payload)) == payload


def test_access_token_claims():
    payload = _payload()
    claims = jwt.decode(
        create_access_token(payload),
        get_settings().jwt_secret.get_secret_value(),
        algorithms=["HS256"],
        audience=ACCESS_TOKEN_AUDIENCE,
    )
    assert claims["iss"] == TOKEN_ISSUER
    assert claims["profile_id"] == str(payload.profile_id)
    assert claims["username"] == "alice_dev"
    assert claims["email"] == "alice@example.com"
    assert claims["exp"] - claims["iat"] == 7 * 24 * 60 * 60


def test_expired_access_token_is_rejected():
    token = create_access_token(_payload(), expires_delta=timedelta(seconds=-1))
    assert verify_access_token(token) is None


def test_access_token_signed_with_other_secret_is_rejected():
    payload = _payload()
    now = datetime.now(timezone.utc)
    token = jwt.encode(
        {
            "profile_id": str(payload.profile_id),
            "username": payload.username,
            "email": payload.email,
            "iss": TOKEN_ISSUER,
            "aud": ACCESS_TOKEN_AUDIENCE,
            "iat": now,
            "exp": now + timedelta(minutes=5),
        },
        "some-other-secret",
        algorithm="HS256",
    )
    assert verify_access_token(token) is None


def test_refresh_and_access_tokens_are_not_interchangeable():
    profile_id = uuid4()
    refresh = create_refresh_token(RefreshTokenPayload(profile_id=profile_id))
    access = create_access_token(_payload())

    assert verify_refresh_token(refresh) == RefreshTokenPayload(profile_id=profile_id)
    assert verify_access_token(refresh) is None
    assert verify_refresh_token(access) is None


def test_garbage_token_is_rejected():
    assert verify_access_token("not-a-jwt") is None
    assert verify_refresh_token("") is None


def test_password_hash_round_trip():
    hashed = hash_password("s3cret-password")
    assert hashed != "s3cret-password"
    assert verify_password(hashed, "s3cret-password")
    assert not verify_password(hashed, "wrong-password")


def test_malformed_hash_fails_closed():
    assert verify_password("dev_password_hash_1", "anything") is False


def test_extract_bearer_token():
    assert extract_bearer_token("Bearer abc.def") == "abc.def"
    assert extract_bearer_token("Basic abc") is None
    assert extract_bearer_token("Bearer ") is None
    assert extract_bearer_token(None) is None


def test_access_token_from_other_issuer_is_rejected():
    payload = _payload()
    now = datetime.now(timezone.utc)
    token = jwt.encode(
        {
            "profile_id": str(payload.profile_id),
            "username": payload.username,
            "email": payload.email,
            "iss": "someone-else",
            "aud": ACCESS_TOKEN_AUDIENCE,
            "iat": now,
            "exp": now + timedelta(minutes=5),
        },
        get_settings().jwt_secret.get_secret_value(),
        algorithm="HS256",
    )
    assert verify_access_token(token) is None


def test_password_hash_uses_fixed_argon2_parameters():
    assert hash_password("s3cret-password").startswith("$argon2id$v=19$m=65536,t=3,p=1$")
