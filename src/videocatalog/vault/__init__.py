"""Secret resolution for catalog settings."""

from videocatalog.vault.base import SecretResolver
from videocatalog.vault.env import EnvironmentSecretResolver
from videocatalog.vault.factory import get_secret_resolver
from videocatalog.vault.secret_manager import SecretManagerResolver

__all__ = [
    "SecretResolver",
    "EnvironmentSecretResolver",
    "SecretManagerResolver",
    "get_secret_resolver",
]
