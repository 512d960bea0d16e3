"""
Abstract authentication provider interface.

Defines the contract that token-based auth providers must implement.
This allows swapping token strategies without changing route code.

Example:
    from common.auth import AuthProvider, JWTAuth

    def get_auth_provider(settings) -> AuthProvider:
        return JWTAuth(secret=settings.JWT_SECRET)
"""

from abc import ABC, abstractmethod
from typing import Dict, Any


class AuthProvider(ABC):
    """
    Abstract authentication provider.

    All methods are async to support both sync and async implementations.
    """

    @abstractmethod
    async def create_token(
        self,
        user_id: str,
        **claims: Any,
    ) -> str:
        """
        Create an access token for a user.

        Args:
            user_id: Subject of the token
            **claims: Extra claims to embed (e.g. admin=True)

        Returns:
            Encoded token string
        """
        pass

    @abstractmethod
    async def verify_token(self, token: str) -> Dict[str, Any]:
        """
        Verify and decode an access token.

        Args:
            token: Encoded token string

        Returns:
            Decoded claims

        Raises:
            ValueError: If the token is invalid or expired
        """
        pass
