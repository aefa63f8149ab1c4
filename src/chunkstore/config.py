"""Settings for the store, the CLI and the HTTP app (env prefix ``CHUNKSTORE_``)."""
from __future__ import annotations

from typing import Any

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.engine import URL

from chunkstore.domain.models import EmbeddingType, SimilarityMetric
from chunkstore.infra.search.sql_text import IDENTIFIER_RE

DRIVERNAME = "postgresql+psycopg"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="CHUNKSTORE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    # Connection
    host: str = "localhost"
    port: int = 5432
    user: str = "postgres"
    password: SecretStr = SecretStr("")
    database: str = "postgres"

    # Store shape, fixed for a store's lifetime
    table_name: str = "chunks"
    vector_dimension: int = Field(default=1536, gt=0)
    embedding_type: EmbeddingType = EmbeddingType.DENSE
    similarity_metric: SimilarityMetric = SimilarityMetric.COSINE
    top_k: int = 10

    # Pool
    pool_size: int = Field(default=5, ge=1)
    max_overflow: int = Field(default=10, ge=0)
    pool_timeout: float = Field(default=30.0, gt=0)
    pool_recycle: int = -1
    pool_pre_ping: bool = True

    # TLS / transport, passed through to the driver
    sslmode: str | None = None
    sslrootcert: str | None = None
    sslcert: str | None = None
    sslkey: str | None = None
    connect_timeout: int | None = None
    application_name: str = "chunkstore"

    log_level: str = "INFO"

    @field_validator("table_name")
    @classmethod
    def table_name_is_identifier(cls, v: str) -> str:
        if not IDENTIFIER_RE.match(v) or len(v) > 63:
            raise ValueError("table_name must be a plain SQL identifier of at most 63 characters")
        return v

    @field_validator("top_k")
    @classmethod
    def top_k_not_zero(cls, v: int) -> int:
        if v == 0:
            raise ValueError("top_k must not be 0 (use a negative value for unlimited)")
        return v

    def sqlalchemy_url(self) -> URL:
        return URL.create(
            DRIVERNAME,
            username=self.user,
            password=self.password.get_secret_value() or None,
            host=self.host,
            port=self.port,
            database=self.database,
        )

    def connect_args(self) -> dict[str, Any]:
        """Driver options that are set, passed through untouched."""
        options = {
            "sslmode": self.sslmode,
            "sslrootcert": self.sslrootcert,
            "sslcert": self.sslcert,
            "sslkey": self.sslkey,
            "connect_timeout": self.connect_timeout,
            "application_name": self.application_name,
        }
        return {k: v for k, v in options.items() if v is not None}


settings = Settings()
