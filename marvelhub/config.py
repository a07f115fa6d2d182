from pydantic import BaseModel
from pydantic_settings import BaseSettings


class MarvelKey(BaseModel):
    public_key: str
    private_key: str


class Settings(BaseSettings):
    db_dsn: str = "sqlite+aiosqlite:///marvelhub.db"

    # Admin bot, started only when a token is configured
    bot_token: str | None = None
    admins: list[int] = []

    api_host: str = "0.0.0.0"
    api_port: int = 5000
    auth_secret: str = "change-me-in-production"
    token_ttl_seconds: int = 7 * 24 * 3600

    spin_max_retries: int = 3
    spin_rate: int = 5
    spin_rate_period: float = 1.0

    marvel_keys: list[MarvelKey] = []
    marvel_base_url: str = "https://gateway.marvel.com/v1/public"
    marvel_max_uses_per_key: int = 1000
    marvel_cache_ttl: int = 3600
    marvel_cache_max_entries: int = 1024

    class Config:
        env_file = ".env"


settings = Settings()
