"""Configuration management for the back-office service."""

from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Development mode
    dev_mode: bool = True

    # Statement reader configuration
    segmentation_strategy: Literal["date", "amount"] = "date"
    min_description_length: int = 3
    infer_statement_year: bool = False  # Off: "DD Mon" tokens get the current year
    max_upload_bytes: int = 20 * 1024 * 1024

    # Data directory
    data_dir: Path = Path.home() / ".backoffice"

    # API settings
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    cors_origins: list[str] = ["http://localhost:3000", "http://localhost:5173"]

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,  # DATA_DIR and data_dir both work
        extra="ignore",  # Ignore extra environment variables
    )

    @property
    def db_path(self) -> Path:
        """Get the SQLite database path."""
        suffix = "dev" if self.dev_mode else "prod"
        return self.data_dir / f"backoffice_{suffix}.db"

    def ensure_directories(self) -> None:
        """Create necessary directories if they don't exist."""
        self.data_dir.mkdir(parents=True, exist_ok=True)

    def log_config(self) -> None:
        """Log current configuration."""
        import os

        print("\n" + "=" * 60)
        print("📋 CONFIGURATION LOADED")
        print("=" * 60)

        env_file_path = os.path.join(os.getcwd(), ".env")
        print(f"Working Directory:     {os.getcwd()}")
        print(f".env file exists:      {os.path.exists(env_file_path)}")

        env_strategy = os.getenv("SEGMENTATION_STRATEGY")
        if env_strategy:
            print(f"⚠️  ENV VAR override:     SEGMENTATION_STRATEGY={env_strategy}")
        print("-" * 60)

        print(f"Dev Mode:              {self.dev_mode}")
        print(f"Segmentation Strategy: {self.segmentation_strategy}")
        print(f"Min Description:       {self.min_description_length} chars")
        print(f"Infer Statement Year:  {self.infer_statement_year}")
        print(f"Max Upload:            {self.max_upload_bytes // (1024 * 1024)} MB")
        print(f"Data Directory:        {self.data_dir}")
        print(f"Database:              {self.db_path}")
        print(f"API Host:              {self.api_host}:{self.api_port}")
        print("=" * 60 + "\n")


# Global settings instance
settings = Settings()
