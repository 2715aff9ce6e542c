"""Service configuration.

Settings are read from environment variables prefixed with ``ODPSEARCH_``
(or a ``.env`` file). Path checks are deferred to ``validate_startup()`` so
importing this module never touches the filesystem.
"""

import logging
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

TERM_INDEX_FILENAME = "term_index.json"
EMBEDDING_INDEX_FILENAME = "embedding_index.npz"


class Settings(BaseSettings):
    """Pattern search configuration.

    Configuration Priority (highest to lowest):
    1. Environment variables (ODPSEARCH_*)
    2. .env file
    3. Default values
    """

    model_config = SettingsConfigDict(
        env_prefix="ODPSEARCH_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ============ PATHS ============

    pattern_repository_path: str = Field(
        default="", description="Directory holding one ontology document per pattern"
    )
    data_dir: str = Field(
        default="data", description="Directory holding the persisted term and embedding indices"
    )
    bulk_metadata_path: str | None = Field(
        default=None, description="Optional semicolon-separated CSV of curated pattern metadata"
    )
    category_list_path: str | None = Field(
        default=None, description="Optional text file listing known categories, one per line"
    )

    # ============ INDEXING ============

    lexical_expander: Literal["wordnet", "static", "none"] = Field(
        default="wordnet", description="Source of synonym/hypernym expansion"
    )
    extractor_timeout_seconds: float = Field(
        default=30.0, gt=0, description="Per-document bound on pattern extraction"
    )
    embedding_dimension: int = Field(default=512, ge=8, le=8192)
    embedding_seed: int = Field(default=7, ge=0)
    embedding_training_cycles: int = Field(default=2, ge=1, le=10)

    # ============ SEARCH ============

    embedding_neighbors: int = Field(
        default=25, ge=1, description="Nearest neighbours requested from the embedding index"
    )
    lexical_limit: int = Field(
        default=100, ge=1, description="Maximum hits taken from the lexical term search"
    )
    default_result_limit: int = Field(default=50, ge=1, le=1000)

    # ============ SERVER ============

    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8000, ge=1, le=65535)
    log_level: str = Field(default="INFO")
    debug: bool = Field(default=False)
    environment: str = Field(default="development")
    sentry_dsn: str | None = Field(default=None)
    cors_allowed_origins: str = Field(default="*")

    @property
    def cors_origins_list(self) -> list[str]:
        """CORS origins as a list (comma-separated in the environment)."""
        return [o.strip() for o in self.cors_allowed_origins.split(",") if o.strip()]

    @property
    def term_index_path(self) -> Path:
        return Path(self.data_dir) / TERM_INDEX_FILENAME

    @property
    def embedding_index_path(self) -> Path:
        return Path(self.data_dir) / EMBEDDING_INDEX_FILENAME

    def validate_startup(self) -> None:
        """Check the settings the service cannot run without.

        Raises:
            ConfigurationError: If the pattern repository is not configured or
                the data directory cannot be created.
        """
        if not self.pattern_repository_path.strip():
            raise ConfigurationError(
                "ODPSEARCH_PATTERN_REPOSITORY_PATH is not set; "
                "the index cannot be built without a pattern repository"
            )
        try:
            Path(self.data_dir).mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ConfigurationError(f"Data directory {self.data_dir} is not usable: {e}") from e

        if not Path(self.pattern_repository_path).is_dir():
            # Not fatal: the repository may be mounted after startup.
            logger.warning(
                f"Pattern repository {self.pattern_repository_path} is not a directory yet; "
                "index rebuilds will fail until it exists"
            )


def configure_logging(config: Settings) -> None:
    """Apply the configured log level to the root logger."""
    level = logging.getLevelName(config.log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


settings = Settings()
