"""Environment-backed secret resolver for local development."""

import logging
import os
import re
from typing import Mapping, Optional

from videocatalog.core.exceptions import SecretNotFound
from videocatalog.vault.base import SecretResolver

logger = logging.getLogger(__name__)


class EnvironmentSecretResolver(SecretResolver):
    """Resolve secrets from ``SECRET_<NAME>`` environment variables.

    ``video-container`` is looked up as ``SECRET_VIDEO_CONTAINER``.
    """

    def __init__(self, prefix: str = "SECRET_", environ: Optional[Mapping[str, str]] = None):
        self.prefix = prefix
        self._environ = environ

    def variable_name(self, name: str) -> str:
        return self.prefix + re.sub(r"[^A-Za-z0-9]", "_", name).upper()

    async def resolve(self, name: str) -> str:
        environ = self._environ if self._environ is not None else os.environ
        variable = self.variable_name(name)

        logger.info("Attempting to retrieve secret", extra={"secret_name": name})
        if variable not in environ:
            logger.error(
                "Secret not found in environment",
                extra={"secret_name": name, "variable": variable},
            )
            raise SecretNotFound(name, f"Secret not found: {name}")

        logger.info("Successfully retrieved secret", extra={"secret_name": name})
        return environ[variable]

    def get_backend_name(self) -> str:
        return "env"
