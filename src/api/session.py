import logging
import os
from typing import Optional

from cryptography.fernet import Fernet, InvalidToken
from fastapi import Request

logger = logging.getLogger(__name__)

SESSION_COOKIE = "session"
SESSION_TTL_S = int(os.getenv("SESSION_TTL_S", str(7 * 24 * 3600)))


class SessionVerifier:
    """
    Issues and verifies Fernet session tokens whose payload is the user id.

    Tokens are presented as ``Authorization: Bearer <token>`` or in the
    ``session`` cookie.
    """

    def __init__(self, key: Optional[str] = None, ttl_s: int = SESSION_TTL_S):
        key = key or os.getenv("SESSION_SECRET")
        if not key:
            # Tokens will not survive a restart; fine for local development only.
            logger.warning("SESSION_SECRET not set. Generating a temporary key.")
            key = Fernet.generate_key().decode()

        self.fernet = Fernet(key.encode() if isinstance(key, str) else key)
        self.ttl_s = ttl_s

    def issue(self, user_id: str) -> str:
        return self.fernet.encrypt(user_id.encode()).decode()

    def verify(self, token: Optional[str]) -> Optional[str]:
        if not token:
            return None
        try:
            user_id = self.fernet.decrypt(token.encode(), ttl=self.ttl_s).decode()
        except InvalidToken:
            logger.info("Rejected invalid or expired session token")
            return None
        return user_id or None


def token_from_request(request: Request) -> Optional[str]:
    header = request.headers.get("authorization", "")
    scheme, _, value = header.partition(" ")
    if scheme.lower() == "bearer" and value.strip():
        return value.strip()
    return request.cookies.get(SESSION_COOKIE)
