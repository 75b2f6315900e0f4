from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt

from catalog.errors import ConfigurationError

JWT_ALGORITHM = 'HS256'


class TokenService:
    """Issues and verifies signed, time-bounded bearer tokens.

    Tokens carry ``userId`` and ``email`` plus the standard ``iat``/``exp``
    claims. Verification is stateless; there is no revocation list, so a
    token stays valid until it expires.
    """

    def __init__(self, secret: Optional[str], lifetime: timedelta = timedelta(hours=24)):
        if not secret:
            raise ConfigurationError('JWT_SECRET is not defined')
        self._secret = secret
        self.lifetime = lifetime

    def issue(self, user_id: str, email: str, now: Optional[datetime] = None) -> str:
        issued = now or datetime.now(timezone.utc)
        claims = {
            'userId': str(user_id),
            'email': email,
            'iat': issued,
            'exp': issued + self.lifetime,
        }
        return jwt.encode(claims, self._secret, algorithm=JWT_ALGORITHM)

    def verify(self, token: Optional[str]) -> Optional[Dict[str, Any]]:
        """Return the token's claims, or None if it is missing, malformed,
        badly signed or expired."""
        if not token:
            return None
        try:
            claims = jwt.decode(
                token,
                self._secret,
                algorithms=[JWT_ALGORITHM],
                options={'require': ['exp', 'iat']},
            )
        except jwt.InvalidTokenError:
            return None
        if not claims.get('userId'):
            return None
        return claims
