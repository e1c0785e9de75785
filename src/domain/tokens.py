"""Issuing and validating session tokens (HS256 JWTs)."""

import time
from dataclasses import dataclass
from typing import Any

import jwt

from .exceptions import ExpiredToken, InvalidToken

SESSION_TTL_SECONDS = 7 * 24 * 60 * 60


@dataclass(frozen=True)
class TokenIssuer:
    """
    Signs and verifies session tokens with a process-wide secret.

    Stateless: a token is valid until its ``exp`` claim passes, and nothing
    is stored server-side.
    """

    secret: str
    ttl_seconds: int = SESSION_TTL_SECONDS
    algorithm: str = "HS256"
    issuer: str | None = None

    def issue(self, account_id: str) -> str:
        """Create a signed token whose subject is ``account_id``."""
        now = int(time.time())
        payload: dict[str, Any] = {
            "sub": account_id,
            "iat": now,
            "exp": now + self.ttl_seconds,
        }
        if self.issuer:
            payload["iss"] = self.issuer
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def verify(self, token: str) -> str:
        """
        Validate a token and return the account id it carries.

        Raises:
            ExpiredToken: Signature is valid but the token has expired
            InvalidToken: Anything else wrong with the token
        """
        try:
            claims = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                issuer=self.issuer,
                options={"require": ["sub", "iat", "exp"]},
            )
        except jwt.ExpiredSignatureError as exc:
            raise ExpiredToken() from exc
        except jwt.PyJWTError as exc:
            raise InvalidToken() from exc

        subject = claims.get("sub")
        if not isinstance(subject, str) or not subject:
            raise InvalidToken()
        return subject
