"""Federated sign-in: verify OIDC ID tokens from an external identity provider.

The signing keys are fetched from the provider's JWKS endpoint and cached for
a few minutes; an unknown key id triggers one refetch so rotated keys are
picked up. Verification checks signature, issuer, audience and expiry, and
only tokens whose email the provider has verified are accepted.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Dict, Optional

import requests
from jose import jwt
from jose.exceptions import JOSEError


class FederatedTokenError(Exception):
    """Raised when an ID token fails verification."""

    def __init__(self, code: str):
        super().__init__(code)
        self.code = code


@dataclass
class FederatedIdentity:
    subject: str
    email: str
    display_name: str


class JWKSCache:
    """Small in-memory cache for a single JWKS document."""

    def __init__(self, url: str, ttl_seconds: int = 300, refresh_interval: int = 10):
        self.url = url
        self.ttl_seconds = ttl_seconds
        self.refresh_interval = refresh_interval
        self._jwks: Optional[Dict[str, object]] = None
        self._fetched_at = 0.0

    def get(self, refresh: bool = False) -> Dict[str, object]:
        """Return the cached document, fetching it when expired.

        ``refresh`` forces a fetch unless the document is younger than
        ``refresh_interval`` seconds.
        """
        now = time.time()
        if self._jwks is not None:
            age = now - self._fetched_at
            if age < (self.refresh_interval if refresh else self.ttl_seconds):
                return self._jwks
        self._jwks = self._fetch()
        self._fetched_at = now
        return self._jwks

    def _fetch(self) -> Dict[str, object]:
        try:
            resp = requests.get(self.url, timeout=5)
        except requests.RequestException as exc:
            raise FederatedTokenError("jwks_fetch_failed") from exc
        if resp.status_code != 200:
            raise FederatedTokenError("jwks_fetch_failed")
        try:
            jwks = resp.json()
        except ValueError as exc:
            raise FederatedTokenError("jwks_invalid") from exc
        if not isinstance(jwks, dict) or "keys" not in jwks:
            raise FederatedTokenError("jwks_invalid")
        return jwks


class FederatedVerifier:
    def __init__(self, issuer: str, audience: str, jwks: JWKSCache):
        self.issuer = issuer
        self.audience = audience
        self.jwks = jwks

    def _find_key(self, kid: str, refresh: bool = False) -> Optional[dict]:
        keys = self.jwks.get(refresh=refresh).get("keys", [])
        return next((k for k in keys if k.get("kid") == kid), None)

    def verify(self, id_token: str) -> FederatedIdentity:
        try:
            header = jwt.get_unverified_header(id_token)
        except JOSEError as exc:
            raise FederatedTokenError("malformed") from exc
        kid = header.get("kid")
        if not kid:
            raise FederatedTokenError("missing_kid")
        key = self._find_key(kid) or self._find_key(kid, refresh=True)
        if not key:
            raise FederatedTokenError("unknown_kid")

        try:
            claims = jwt.decode(
                id_token,
                key,
                algorithms=[key.get("alg", "RS256")],
                audience=self.audience,
                issuer=self.issuer,
                options={"verify_at_hash": False},
            )
        except JOSEError as exc:
            raise FederatedTokenError("invalid_token") from exc

        email = claims.get("email")
        if not email:
            raise FederatedTokenError("missing_email")
        if claims.get("email_verified") not in (True, "true"):
            raise FederatedTokenError("email_unverified")
        return FederatedIdentity(
            subject=str(claims.get("sub", "")),
            email=str(email).lower(),
            display_name=str(claims.get("name") or email.split("@")[0]),
        )


def build_verifier(issuer: str, audience: str, jwks_url: str) -> Optional[FederatedVerifier]:
    """Return a verifier, or None when federated sign-in is not configured."""
    if not issuer or not jwks_url:
        return None
    return FederatedVerifier(issuer=issuer, audience=audience, jwks=JWKSCache(jwks_url))
