"""Session domain service."""

import logfire

from kycauth.domain.model import User

from .base import Service
from .jwt_service import JWTService, TokenPair
from .refresh_token_service import RefreshTokenLedger


class SessionService(Service):
    """Issues token pairs and records the refresh half in the ledger."""

    def __init__(self, jwt_service: JWTService, ledger: RefreshTokenLedger) -> None:
        self.jwt_service = jwt_service
        self.ledger = ledger

    async def start_session(self, user: User) -> TokenPair:
        with logfire.span("session_service.start_session", user_id=str(user.id)):
            pair = self.jwt_service.create_token_pair(user)
            await self.ledger.add(user.id, pair.refresh_token)
            return pair
