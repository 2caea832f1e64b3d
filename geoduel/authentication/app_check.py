import hashlib
import logging
import secrets
from typing import List, Optional

from fastapi import Header, Request, status

from geoduel.errors import DuelError
from geoduel.models.settings_models import DuelSettings


def _digest(token: str) -> str:
    return hashlib.sha256(token.encode()).hexdigest()


class AppCheck:
    """Opaque pass/fail gate in front of the duel endpoints.

    The caller sends a token in the ``X-Firebase-AppCheck`` header; it passes when it
    equals one of the configured tokens.
    """

    def __init__(self, settings: DuelSettings):
        self.enabled: bool = settings.app_check_enabled
        self.token_digests: List[str] = [_digest(token) for token in settings.app_check_tokens]

    def check_token(self, token: Optional[str]) -> None:
        """Check the token sent by the client

        Args:
            token (Optional[str]): Value of the X-Firebase-AppCheck header

        Raises:
            DuelError: app_check_not_configured when the gate is on but has no tokens
            DuelError: missing_app_check_token when no token was sent
            DuelError: invalid_app_check_token when the token is not allowed
        """
        if not self.enabled:
            return
        if not self.token_digests:
            raise DuelError(status.HTTP_500_INTERNAL_SERVER_ERROR, "app_check_not_configured")
        if not token:
            raise DuelError(status.HTTP_401_UNAUTHORIZED, "missing_app_check_token")

        hashed_token = _digest(token)
        if not any(
            secrets.compare_digest(hashed_token, token_digest)
            for token_digest in self.token_digests
        ):
            logging.warning("App check token verification failed")
            raise DuelError(status.HTTP_401_UNAUTHORIZED, "invalid_app_check_token")


async def verify_app_check(
    request: Request,
    app_check_token: Optional[str] = Header(default=None, alias="X-Firebase-AppCheck"),
) -> None:
    app_check: AppCheck = request.app.state.app_check
    app_check.check_token(app_check_token)
