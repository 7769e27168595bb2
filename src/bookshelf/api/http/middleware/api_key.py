"""Static API key check for the book routes."""

import secrets

from fastapi import HTTPException, Request
from loguru import logger

from src.bookshelf.runtime.config.config_data import SecurityConfig


class APIKeyGuard:
    """Reject requests that do not carry one of the configured API keys."""

    def __init__(self, config: SecurityConfig) -> None:
        self._enabled = config.enable_api_key
        self._header = config.api_key_header
        self._keys = tuple(key for key in config.api_keys if key)

        if self._enabled and not self._keys:
            logger.warning("API key check enabled but no API keys configured")

    @property
    def enabled(self) -> bool:
        return self._enabled

    def is_valid(self, api_key: str) -> bool:
        # Compare against every key so timing does not reveal which one matched
        matched = False
        for candidate in self._keys:
            if secrets.compare_digest(api_key.encode(), candidate.encode()):
                matched = True
        return matched

    async def __call__(self, request: Request) -> None:
        if not self._enabled:
            return

        client_ip = request.client.host if request.client else "unknown"
        api_key = request.headers.get(self._header)
        if not api_key:
            logger.bind(path=request.url.path, client_ip=client_ip).warning(
                "Missing API key"
            )
            raise HTTPException(status_code=401, detail="API key required")

        if not self.is_valid(api_key):
            logger.bind(
                path=request.url.path,
                client_ip=client_ip,
                api_key_prefix=f"{api_key[:8]}...",
            ).warning("Invalid API key")
            raise HTTPException(status_code=401, detail="Invalid API key")
