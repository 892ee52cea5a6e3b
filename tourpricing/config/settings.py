"""Application settings and configuration management."""
from typing import Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class PricingSettings(BaseSettings):
    """Quote calculation and display configuration."""

    base_currency: str = "INR"  # Currency every stored rate is expressed in
    currency_locale: str = "en_IN"  # Locale used when rendering amounts
    default_markup: float = 0.0  # Percentage applied when a request sends none
    include_names: bool = False  # Attach room/occupancy/meal plan names to lines

    model_config = SettingsConfigDict(env_prefix="PRICING_")


class ImportSettings(BaseSettings):
    """Hotel rate workbook import configuration."""

    preferred_sheet_name: str = "uploadtemplate"
    reject_foreign_currency: bool = False  # Reject rows priced in another currency instead of warning
    max_file_size_bytes: int = 10 * 1024 * 1024

    model_config = SettingsConfigDict(env_prefix="IMPORT_")


class AWSSettings(BaseSettings):
    """AWS service configuration."""

    region: str = "ap-south-1"
    access_key_id: str = ""  # Explicit credentials; empty uses the default provider chain
    secret_access_key: str = ""
    endpoint_url: Optional[str] = None  # S3-compatible endpoint for local stacks
    report_bucket: str = ""  # Bucket import reports are written to (empty disables upload)
    report_prefix: str = "{env}-rate-import-reports"
    max_retries: int = 3
    request_timeout: int = 30

    model_config = SettingsConfigDict(env_prefix="AWS_")


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    format: Literal["json", "console"] = "json"
    stream: Literal["stdout", "stderr"] = "stderr"  # stdout is reserved for CLI results

    model_config = SettingsConfigDict(env_prefix="LOG_")


class Settings(BaseSettings):
    """Main application settings."""

    environment: Literal["dev", "staging", "prod"] = "dev"
    debug: bool = False

    # Sub-settings
    pricing: PricingSettings = PricingSettings()
    imports: ImportSettings = ImportSettings()
    aws: AWSSettings = AWSSettings()
    logging: LoggingSettings = LoggingSettings()

    # JSON file with reference data and stored rates (CLI / Lambda runs)
    catalog_path: Optional[str] = None

    # Feature flags
    dry_run: bool = False

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def aws_report_prefix(self) -> str:
        """Get report key prefix with environment interpolation."""
        return self.aws.report_prefix.replace("{env}", self.environment)


# Global settings instance
settings = Settings()
