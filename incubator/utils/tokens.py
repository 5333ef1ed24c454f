import hashlib
import secrets


def new_token():
    return secrets.token_urlsafe(32)


def hash_token(token):
    """One-way digest; only this is stored, never the raw token."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()
