import hmac
import json
import logging
import threading
import time
from typing import Any, Callable

import jwt
import requests
from flask import current_app, g, request
from jwt.algorithms import RSAAlgorithm

from . import errors

logger = logging.getLogger(__name__)

Claims = dict[str, Any]


def extract_bearer(header: str | None) -> str:
    """Returns the token from an ``Authorization: Bearer <token>`` header."""
    if not header:
        raise errors.Unauthenticated()
    scheme, _, token = header.strip().partition(" ")
    token = token.strip()
    if scheme.lower() != "bearer" or not token or " " in token:
        raise errors.Unauthenticated()
    return token


class ClaimsVerifier:
    def __init__(
        self,
        jwks_uri: str,
        issuer: str,
        audience: str,
        *,
        cache_seconds: float = 3600.0,
        min_refresh_seconds: float = 60.0,
        timeout: float = 5.0,
        fetch_jwks: Callable[[], dict] | None = None,
    ):
        self.jwks_uri = jwks_uri
        self.issuer = issuer
        self.audience = audience
        self.cache_seconds = cache_seconds
        self.min_refresh_seconds = min_refresh_seconds
        self.timeout = timeout
        self._fetch_jwks = fetch_jwks or self._download_jwks
        self._keys: dict[str, Any] = {}
        self._fetched_at: float | None = None
        self._lock = threading.Lock()

    def _download_jwks(self) -> dict:
        if not self.jwks_uri:
            raise ValueError("JWKS_URI is not configured")
        resp = requests.get(self.jwks_uri, timeout=self.timeout)
        resp.raise_for_status()
        return resp.json()

    def _refresh(self) -> None:
        data = self._fetch_jwks()
        keys = {}
        for jwk in data.get("keys", []):
            kid = jwk.get("kid")
            if not kid or jwk.get("kty") != "RSA":
                continue
            keys[kid] = RSAAlgorithm.from_jwk(json.dumps(jwk))
        self._keys = keys
        self._fetched_at = time.monotonic()

    def signing_key(self, kid: str):
        """
        Cached key for ``kid``. An unknown kid refetches the key set at most
        once per ``min_refresh_seconds``; otherwise it is rejected from cache.
        """
        with self._lock:
            age = None if self._fetched_at is None else time.monotonic() - self._fetched_at
            if age is None or age >= self.cache_seconds:
                self._refresh()
            elif kid not in self._keys and age >= self.min_refresh_seconds:
                logger.info("Unknown key id %s, refreshing JWKS", kid)
                self._refresh()
            return self._keys.get(kid)

    def verify(self, token: str) -> Claims:
        try:
            header = jwt.get_unverified_header(token)
        except jwt.PyJWTError as e:
            logger.warning("Rejected token with unreadable header: %s", e)
            raise errors.InvalidToken() from e

        if header.get("alg") != "RS256" or not header.get("kid"):
            logger.warning("Rejected token with alg=%s kid=%s", header.get("alg"), header.get("kid"))
            raise errors.InvalidToken()

        try:
            key = self.signing_key(header["kid"])
        except (requests.RequestException, ValueError) as e:
            logger.warning("JWKS lookup failed: %s", e)
            raise errors.InvalidToken() from e
        if key is None:
            logger.warning("Token key id %s not published by issuer", header["kid"])
            raise errors.InvalidToken()

        try:
            return jwt.decode(
                token,
                key,
                algorithms=["RS256"],
                audience=self.audience,
                issuer=self.issuer,
                options={"require": ["exp"]},
            )
        except jwt.ExpiredSignatureError as e:
            logger.info("Rejected expired token")
            raise errors.TokenExpired() from e
        except jwt.PyJWTError as e:
            logger.warning("JWT verification failed: %s", e)
            raise errors.InvalidToken() from e


def build_verifier(config) -> ClaimsVerifier:
    return ClaimsVerifier(
        config["JWKS_URI"],
        config["TOKEN_ISSUER"],
        config["AZURE_CLIENT_ID"],
        cache_seconds=config["JWKS_CACHE_SECONDS"],
        min_refresh_seconds=config["JWKS_MIN_REFRESH_SECONDS"],
        timeout=config["JWKS_TIMEOUT"],
    )


def verify_request() -> Claims:
    """
    Verifies the bearer token of the current request and keeps the claims on ``g``.
    """
    token = extract_bearer(request.headers.get("Authorization"))
    claims = current_app.extensions["claims_verifier"].verify(token)
    g.claims = claims
    return claims


def claims_email(claims: Claims) -> str | None:
    email = claims.get("preferred_username") or claims.get("email")
    return email.strip().lower() if isinstance(email, str) and email.strip() else None


def check_admin() -> bool:
    """
    Checks the x-client-id / x-client-secret header pair against the configured admin client.
    """
    expected_id = current_app.config.get("ADMIN_CLIENT_ID") or ""
    expected_secret = current_app.config.get("ADMIN_CLIENT_SECRET") or ""
    if not expected_id or not expected_secret:
        return False

    client_id = request.headers.get("x-client-id", "").encode()
    client_secret = request.headers.get("x-client-secret", "").encode()
    id_ok = hmac.compare_digest(client_id, expected_id.encode())
    secret_ok = hmac.compare_digest(client_secret, expected_secret.encode())
    return id_ok and secret_ok
