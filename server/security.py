from __future__ import annotations

from typing import Any, Dict, Optional, Protocol

from fastapi import Request

from noticepack.errors import AuthenticationError


class TokenVerifier(Protocol):
    def get_user(self, token: str) -> Optional[Dict[str, Any]]: ...


def bearer_token(request: Request) -> Optional[str]:
    auth_header = request.headers.get("Authorization") or ""
    if not auth_header.lower().startswith("bearer "):
        return None
    token = auth_header[7:].strip()
    return token or None


def authenticate(request: Request, verifier: TokenVerifier) -> Dict[str, Any]:
    """Resolve the caller from the bearer token; the identity provider has the final word."""
    token = bearer_token(request)
    if not token:
        raise AuthenticationError("Missing access token")
    user = verifier.get_user(token)
    if not user or not user.get("id"):
        raise AuthenticationError("Invalid token")
    request.state.access_token = token
    return user
