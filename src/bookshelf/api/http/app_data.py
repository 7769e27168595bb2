from dataclasses import dataclass

from src.bookshelf.api.http.middleware.api_key import APIKeyGuard
from src.bookshelf.api.http.middleware.limiter import TokenBucketRateLimiter
from src.bookshelf.core.services import DbSessionService
from src.bookshelf.runtime.config.config_data import ConfigData


@dataclass
class ApplicationDependencies:
    config: ConfigData
    database_service: DbSessionService
    api_key_guard: APIKeyGuard
    rate_limiter: TokenBucketRateLimiter | None = None
