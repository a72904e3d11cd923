"""Tests for ID-token verification against a provider's signing keys."""

import base64
import time

import pytest
from fastapi.testclient import TestClient
from jose import jwt

from app.backend import build_backend
from app.main import create_app
from app.models.user import User
from app.services.federated import FederatedTokenError, FederatedVerifier, JWKSCache
from conftest import sign_up

ISSUER = "https://idp.example.edu"
AUDIENCE = "feedback-portal"


def _jwk(kid, secret):
    k = base64.urlsafe_b64encode(secret.encode()).rstrip(b"=").decode()
    return {"kty": "oct", "kid": kid, "alg": "HS256", "k": k}


def _token(kid, secret, email="fed@example.edu", email_verified=True, **claims):
    payload = {
        "iss": ISSUER,
        "aud": AUDIENCE,
        "sub": "sub-1",
        "email": email,
        "email_verified": email_verified,
        "name": "Fed User",
        "exp": int(time.time()) + 300,
    }
    payload.update(claims)
    return jwt.encode(payload, secret, algorithm="HS256", headers={"kid": kid})


class StaticJWKS(JWKSCache):
    """JWKS cache serving a sequence of documents instead of fetching over HTTP."""

    def __init__(self, *documents, refresh_interval=0):
        super().__init__("https://idp.example.edu/jwks", refresh_interval=refresh_interval)
        self.documents = list(documents)
        self.fetches = 0

    def _fetch(self):
        doc = self.documents[min(self.fetches, len(self.documents) - 1)]
        self.fetches += 1
        return doc


def _verifier(jwks):
    return FederatedVerifier(issuer=ISSUER, audience=AUDIENCE, jwks=jwks)


class TestVerifier:
    """Test signature, claim and key handling."""

    def test_valid_token(self):
        jwks = StaticJWKS({"keys": [_jwk("k1", "first-secret")]})
        identity = _verifier(jwks).verify(_token("k1", "first-secret", email="Fed@Example.edu"))
        assert identity.email == "fed@example.edu"
        assert identity.display_name == "Fed User"

    def test_unverified_email_rejected(self):
        jwks = StaticJWKS({"keys": [_jwk("k1", "first-secret")]})
        with pytest.raises(FederatedTokenError) as exc:
            _verifier(jwks).verify(_token("k1", "first-secret", email_verified=False))
        assert exc.value.code == "email_unverified"

    def test_missing_email_verified_claim_rejected(self):
        jwks = StaticJWKS({"keys": [_jwk("k1", "first-secret")]})
        token = _token("k1", "first-secret", email_verified=None)
        with pytest.raises(FederatedTokenError) as exc:
            _verifier(jwks).verify(token)
        assert exc.value.code == "email_unverified"

    def test_wrong_audience(self):
        jwks = StaticJWKS({"keys": [_jwk("k1", "first-secret")]})
        with pytest.raises(FederatedTokenError) as exc:
            _verifier(jwks).verify(_token("k1", "first-secret", aud="someone-else"))
        assert exc.value.code == "invalid_token"

    def test_rotated_key_refetched_once(self):
        jwks = StaticJWKS(
            {"keys": [_jwk("k1", "first-secret")]},
            {"keys": [_jwk("k2", "second-secret")]},
        )
        verifier = _verifier(jwks)
        verifier.verify(_token("k1", "first-secret"))
        assert jwks.fetches == 1

        identity = verifier.verify(_token("k2", "second-secret"))
        assert identity.email == "fed@example.edu"
        assert jwks.fetches == 2

    def test_unknown_key_refetch_is_throttled(self):
        jwks = StaticJWKS({"keys": [_jwk("k1", "first-secret")]}, refresh_interval=60)
        verifier = _verifier(jwks)
        verifier.verify(_token("k1", "first-secret"))
        with pytest.raises(FederatedTokenError) as exc:
            verifier.verify(_token("k9", "other-secret"))
        assert exc.value.code == "unknown_kid"
        assert jwks.fetches == 1


class TestFederatedAccountLinking:
    """Test that federated sign-in cannot claim an account without a verified email."""

    @pytest.fixture
    def client(self, test_settings):
        jwks = StaticJWKS({"keys": [_jwk("k1", "first-secret")]})
        backend = build_backend(test_settings, federated=_verifier(jwks))
        with TestClient(create_app(backend=backend)) as c:
            yield c

    def test_unverified_email_cannot_take_over_account(self, client):
        sign_up(client, "admin@example.edu", "admin")
        token = _token("k1", "first-secret", email="admin@example.edu", email_verified=False)
        resp = client.post("/api/auth/federated", json={"id_token": token})
        assert resp.status_code == 401
        assert resp.json()["detail"] == "Federated sign-in failed. Please try again."
        assert "access_token" not in resp.json()

    def test_verified_email_signs_in(self, client):
        token = _token("k1", "first-secret", email="new@example.edu")
        resp = client.post("/api/auth/federated", json={"id_token": token, "role": "student"})
        assert resp.status_code == 200
        assert resp.json()["role"] == "student"

    def test_no_account_created_for_rejected_token(self, client):
        token = _token("k1", "first-secret", email="ghost@example.edu", email_verified=False)
        client.post("/api/auth/federated", json={"id_token": token})
        db = client.app.state.backend.session_factory()
        try:
            assert db.query(User).filter(User.email == "ghost@example.edu").count() == 0
        finally:
            db.close()
