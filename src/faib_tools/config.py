"""
Configuration management for FAIB Internal Tools.
Supports .env files and environment variables.
"""

from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # SheepCRM API
    sheepcrm_api_key: Optional[str] = None
    sheepcrm_bucket: Optional[str] = None
    sheepcrm_base_url: str = "https://sls-api.sheepcrm.com"
    sheepcrm_webhook_secret: Optional[str] = None
    sheepcrm_timeout_seconds: float = 30.0

    # Trainer/Assessor application form
    assessor_form_uri: str = "/faib/form/66ab99d17039ceb319c18bde/"

    # Claude API (for renewal and application reviews)
    anthropic_api_key: Optional[str] = None
    claude_model: str = "claude-sonnet-4-5-20250929"
    renewal_analysis_max_tokens: int = 1024
    assessor_analysis_max_tokens: int = 2048

    # S3 Storage (licence PDFs)
    s3_bucket: Optional[str] = None
    aws_access_key_id: Optional[str] = None
    aws_secret_access_key: Optional[str] = None
    aws_region: str = "eu-west-2"
    aws_endpoint_url: Optional[str] = None  # For S3-compatible services (MinIO, etc.)
    licence_url_expiry_seconds: int = 300

    # Application settings
    app_name: str = "FAIB Internal Tools"
    debug: bool = False

    def is_sheepcrm_configured(self) -> bool:
        """Check that both the API key and bucket are present."""
        return bool(self.sheepcrm_api_key and self.sheepcrm_bucket)


# Global settings instance
settings = Settings()


def get_settings() -> Settings:
    """Get the global settings instance."""
    return settings
