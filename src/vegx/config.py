"""Configuration settings for Veg-X integration."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Integration defaults loaded from environment variables.

    Every value can be overridden per call; these are only the fallbacks.
    """

    model_config = SettingsConfigDict(
        env_prefix="VEGX_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Format for parsing obsStartDate cells (strptime syntax)
    date_format: str = "%Y-%m-%d"

    # Literal cell values treated as missing; null cells are always missing
    missing_values: list[str] = ["", "0"]

    # Log method registration and end-of-call summaries at INFO
    verbose: bool = True

    # Root log level applied by the CLI
    log_level: str = "WARNING"


settings = Settings()
