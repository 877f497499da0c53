"""Application settings loaded from environment variables via pydantic-settings.

Values are read from (highest priority first):

  1. Environment variables, e.g. ``PINECONE_API_KEY=...``
  2. A ``.env`` file in the working directory (local development)
  3. The defaults declared below

Field names map to upper-cased variable names automatically
(``voyage_api_key`` <- ``VOYAGE_API_KEY``).  Tunables that are not secrets
or deployment-specific live in ``config/config.yaml`` instead; see
:mod:`src.config.loader`.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """lexsearch application settings.

    Empty strings mean "not configured"; providers report themselves as
    unavailable instead of failing at import time.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # === Vector index (Pinecone) ===
    pinecone_api_key: str = ""
    pinecone_index: str = ""
    # Namespace used for both upserts and queries.  "" is the default namespace.
    pinecone_namespace: str = ""
    pinecone_cloud: str = "aws"
    pinecone_region: str = "us-east-1"

    # === Embeddings (Voyage) ===
    voyage_api_key: str = ""
    voyage_model: str = "voyage-law-2"

    # === Documents ===
    docs_dir: str = "docs"
    metadata_path: str = "docs/db.json"

    # === Deployment ===
    # Public host of the deployed service (no scheme), used by the CLI
    # ``trigger`` command.
    production_url: str = ""

    # === App Config ===
    app_host: str = "0.0.0.0"
    app_port: int = 8000
    app_env: str = "development"
    log_level: str = "INFO"

    def get_missing_credentials(self) -> list[str]:
        """Return the names of required variables that are still empty."""
        missing: list[str] = []
        if not self.pinecone_api_key:
            missing.append("PINECONE_API_KEY")
        if not self.pinecone_index:
            missing.append("PINECONE_INDEX")
        if not self.voyage_api_key:
            missing.append("VOYAGE_API_KEY")
        return missing
