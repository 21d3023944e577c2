"""
Security helpers for password hashing and JWT authentication.

This module implements a lightweight JSON Web Token (JWT) mechanism
using HMAC‑SHA256 signatures and base64url encoding.  Tokens embed the
user's identity claims (``id``, ``email``, ``name``, ``role``) and an
expiration timestamp (``exp``).  The signing secret is passed in
explicitly; request dependencies read it from the settings stored on
the application.

Passwords are hashed with PBKDF2‑HMAC‑SHA256 and a random per‑password
salt, stored as ``salthex$hashhex``.
"""

import base64
import hashlib
import hmac
import json
import logging
import os
import time
from typing import Any, Callable, Dict, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .errors import AuthenticationError, ForbiddenError, internal_errors

logger = logging.getLogger(__name__)

TOKEN_LIFETIME_SECONDS = 60 * 60
PBKDF2_ITERATIONS = 100_000


class InvalidTokenError(Exception):
    """Raised for any token verification failure."""

    def __init__(self) -> None:
        super().__init__("Invalid token")


def _b64_url_encode(data: bytes) -> str:
    """Base64‑url encode bytes without padding."""
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("utf-8")


def _b64_url_decode(data: str) -> bytes:
    """Decode base64‑url encoded string, adding padding if necessary."""
    padding = "=" * (-len(data) % 4)
    return base64.urlsafe_b64decode(data + padding)


def _sign(message: bytes, secret: str) -> bytes:
    return hmac.new(secret.encode("utf-8"), message, hashlib.sha256).digest()


def sign_token(claims: Dict[str, Any], secret: str, expires_in: int = TOKEN_LIFETIME_SECONDS) -> str:
    """Create a signed JWT carrying ``claims``.

    The payload is extended with an ``exp`` field (UNIX timestamp)
    ``expires_in`` seconds from now.  The token has the form
    ``header.payload.signature``, each part base64url encoded.

    Parameters
    ----------
    claims : dict
        Claims to embed, typically ``{"id", "email", "name", "role"}``.
    secret : str
        HMAC signing secret.
    expires_in : int
        Lifetime of the token in seconds.  Defaults to one hour.

    Returns
    -------
    str
        A signed JWT token.
    """
    to_encode = dict(claims)
    to_encode["exp"] = int(time.time()) + expires_in
    header = {"alg": "HS256", "typ": "JWT"}
    header_b64 = _b64_url_encode(json.dumps(header, separators=(",", ":")).encode("utf-8"))
    payload_b64 = _b64_url_encode(json.dumps(to_encode, separators=(",", ":")).encode("utf-8"))
    signing_input = f"{header_b64}.{payload_b64}".encode("utf-8")
    signature_b64 = _b64_url_encode(_sign(signing_input, secret))
    return f"{header_b64}.{payload_b64}.{signature_b64}"


def verify_token(token: str, secret: str) -> Dict[str, Any]:
    """Verify and decode a JWT token.

    Checks the structure, the HMAC signature and the ``exp`` claim.
    The reason for a failure is not exposed: every failure raises
    ``InvalidTokenError``.

    Returns
    -------
    dict
        The decoded claims, including ``exp``.
    """
    try:
        parts = token.split(".")
        if len(parts) != 3:
            raise InvalidTokenError()
        header_b64, payload_b64, signature_b64 = parts
        signing_input = f"{header_b64}.{payload_b64}".encode("utf-8")
        expected_sig = _sign(signing_input, secret)
        actual_sig = _b64_url_decode(signature_b64)
        # Constant‑time comparison to prevent timing attacks
        if not hmac.compare_digest(expected_sig, actual_sig):
            raise InvalidTokenError()
        data = json.loads(_b64_url_decode(payload_b64).decode("utf-8"))
        if not isinstance(data, dict):
            raise InvalidTokenError()
        if data.get("exp") is None or int(data["exp"]) < int(time.time()):
            raise InvalidTokenError()
        return data
    except InvalidTokenError:
        raise
    except (ValueError, TypeError, AttributeError) as exc:
        # binascii.Error and json.JSONDecodeError are ValueErrors
        raise InvalidTokenError() from exc


def hash_password(password: str) -> str:
    """Hash a password using PBKDF2‑HMAC with SHA‑256.

    A 16‑byte random salt is generated for each password.  The result
    holds the salt and the derived key in hex, separated by ``$``.
    """
    salt = os.urandom(16)
    dk = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, PBKDF2_ITERATIONS)
    return f"{salt.hex()}${dk.hex()}"


def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    """Verify a plain password against a stored ``salt$hash`` string."""
    if not hashed_password or not plain_password:
        return False
    try:
        salt_hex, hash_hex = hashed_password.split("$", 1)
        salt = bytes.fromhex(salt_hex)
        stored_hash = bytes.fromhex(hash_hex)
    except ValueError:
        return False
    dk = hashlib.pbkdf2_hmac("sha256", plain_password.encode("utf-8"), salt, PBKDF2_ITERATIONS)
    return hmac.compare_digest(dk, stored_hash)


security = HTTPBearer(auto_error=False)


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Dict[str, Any]:
    """Dependency that retrieves the current authenticated user.

    Raises a 401 when the ``Authorization`` header is missing, the
    token does not verify, or the user it names no longer exists or
    has been deactivated.  On success returns the token claims with
    ``role`` refreshed from the stored user.
    """
    if credentials is None:
        raise AuthenticationError("Token no proporcionado")
    settings = request.app.state.settings
    try:
        claims = verify_token(credentials.credentials, settings.jwt_secret)
    except InvalidTokenError:
        raise AuthenticationError("Token inválido o expirado")

    database = request.app.state.database
    with internal_errors("Error al verificar el usuario autenticado"):
        user = await database.users.get_by_id(str(claims.get("id", "")))
    if user is None:
        raise AuthenticationError("El usuario ya no existe")
    if not user.get("isActive", True):
        raise AuthenticationError("Usuario inactivo")
    claims["role"] = user.get("role", "user")
    return claims


def require_roles(*roles: str) -> Callable[..., Any]:
    """Dependency factory enforcing that the current user has one of ``roles``.

    Use as ``Depends(require_roles("admin"))``.  Raises a 403 otherwise
    and returns the claims on success.
    """

    async def _role_dependency(current_user: Dict[str, Any] = Depends(get_current_user)) -> Dict[str, Any]:
        if current_user.get("role") not in roles:
            logger.warning("User %s denied, role %s not in %s", current_user.get("id"), current_user.get("role"), roles)
            raise ForbiddenError("No tienes permisos para realizar esta acción")
        return current_user

    return _role_dependency
