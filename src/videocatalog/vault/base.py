"""Abstract secret resolver interface."""

from abc import ABC, abstractmethod


class SecretResolver(ABC):
    """Abstract base class for secret stores."""

    @abstractmethod
    async def resolve(self, name: str) -> str:
        """Look up a secret value by name.

        Args:
            name: Secret name in the backing store

        Returns:
            Secret value

        Raises:
            SecretNotFound: If the store has no such secret
            SecretUnavailable: If the store cannot be reached
            SecretUnauthorized: If access to the secret is denied
        """
        pass

    @abstractmethod
    def get_backend_name(self) -> str:
        """Return backend identifier."""
        pass
