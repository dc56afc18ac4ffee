from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    """Strongly-typed settings model loaded from env / .env.

    Notes:
        - The database DSN and the JWT verification key must be provided via
          environment variables; the app fails fast when they are missing.
        - `CACHE_URL` selects the drill list cache backend: unset keeps an
          in-process TTL map, `redis://...` shares it across instances.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        protected_namespaces=()
    )

    ENV: str = Field(..., description="Deployment environment, e.g. dev/staging/prod")
    SERVICE_NAME: str = Field(default="interview-drills", description="Service name")
    LOG_LEVEL: str = Field(default="INFO", description="Root log level")

    DATABASE_DSN: str = Field(..., description="SQLAlchemy async DSN, e.g. postgresql+asyncpg://...")

    JWT_VERIFY_KEY: str = Field(..., description="JWT public key (RS*) or shared secret (HS*)")
    JWT_ALGORITHM: str = Field(default="RS256", description="Expected JWT signature algorithm")
    OIDC_ISSUER: str | None = Field(default=None, description="Expected token issuer, checked when set")
    OIDC_AUDIENCE: str | None = Field(default=None, description="Expected token audience, checked when set")

    CACHE_URL: str | None = Field(default=None, description="Redis URL for the shared drill list cache")
    DRILLS_CACHE_TTL: int = Field(default=60, ge=0, description="Drill list cache TTL in seconds")

    FRONTEND_ORIGINS: str = Field(default="http://localhost:3000", description="Comma-separated CORS origins")
    ATTEMPTS_MAX_LIMIT: int = Field(default=50, ge=1, description="Upper bound for the attempts history page size")

    @property
    def allow_origins(self) -> list[str]:
        """CORS origins parsed from `FRONTEND_ORIGINS`."""
        return [o.strip() for o in self.FRONTEND_ORIGINS.split(",") if o.strip()]


@lru_cache()
def get_settings() -> Settings:
    """Return a cached singleton `Settings` instance."""
    return Settings()
