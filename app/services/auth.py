"""Client-side view of the caller's authentication state."""
import logging
import time
from typing import Any, Dict, Optional

import jwt

logger = logging.getLogger(__name__)


class AuthSession:
    """
    Bearer token carried by the caller.

    The backend verifies the token signature on every create call; here we
    only decode it to know whether a submission is worth attempting.
    """

    def __init__(self, token: Optional[str] = None):
        self.token = token
        self.claims = self._decode(token) if token else None

    @staticmethod
    def _decode(token: str) -> Optional[Dict[str, Any]]:
        try:
            return jwt.decode(
                token,
                options={"verify_signature": False, "verify_exp": True},
                algorithms=["RS256", "HS256"],
            )
        except jwt.ExpiredSignatureError:
            logger.info("Session token has expired")
            return None
        except jwt.InvalidTokenError as e:
            logger.warning(f"Invalid session token: {str(e)}")
            return None

    @property
    def is_authenticated(self) -> bool:
        if not self.claims:
            return False
        exp = self.claims.get("exp")
        return exp is None or exp > time.time()

    @property
    def email(self) -> Optional[str]:
        if not self.claims:
            return None
        return self.claims.get("email")

    @property
    def user_id(self) -> Optional[str]:
        if not self.claims:
            return None
        return self.claims.get("sub")

    @property
    def notification_key(self) -> str:
        """Key of this caller's notification queue."""
        return self.user_id or self.email or "anonymous"


ANONYMOUS_SESSION = AuthSession()
