"""
Password hashing and personal access token helpers.

Passwords are hashed with passlib. Personal access tokens are issued as
``"{id}|{secret}"``; only the SHA-256 digest of the secret is stored, so the
plain token is shown to the client exactly once.
"""

from __future__ import annotations

import hashlib
import hmac
import secrets
import string
from typing import Optional

from passlib.context import CryptContext

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

TOKEN_SECRET_LENGTH = 40
INVITE_TOKEN_LENGTH = 32

_ALPHABET = string.ascii_letters + string.digits


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, hashed: Optional[str]) -> bool:
    if not hashed:
        return False
    return pwd_context.verify(password, hashed)


def random_string(length: int) -> str:
    """Return a URL-safe random string of ``length`` alphanumeric characters."""
    return "".join(secrets.choice(_ALPHABET) for _ in range(length))


def hash_token(secret: str) -> str:
    return hashlib.sha256(secret.encode("utf-8")).hexdigest()


def tokens_match(secret: str, stored_hash: str) -> bool:
    return hmac.compare_digest(hash_token(secret), stored_hash)


def split_token(plain_token: str) -> tuple[Optional[int], str]:
    """Split a ``"{id}|{secret}"`` bearer token.

    Returns:
        ``(token_id, secret)``; ``token_id`` is None when the token carries no
        usable id prefix.
    """
    if "|" not in plain_token:
        return None, plain_token
    token_id, _, secret = plain_token.partition("|")
    if not token_id.isdigit():
        return None, secret
    return int(token_id), secret
