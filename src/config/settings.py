"""
Sales Reports Platform
Centralized Configuration Management

Pydantic settings for the extraction, aggregation and serving layers, loaded
from environment variables (and an optional .env file) with validation.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional, List
from pydantic import BaseModel, Field, field_validator, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class WooCommerceSettings(BaseSettings):
    """WooCommerce REST API Configuration"""

    model_config = SettingsConfigDict(env_prefix="WOOCOMMERCE_", populate_by_name=True)

    url: str = Field(default="https://mayasquare.com", description="WooCommerce store URL")
    consumer_key: Optional[SecretStr] = Field(default=None, description="API consumer key (orders:read)")
    consumer_secret: Optional[SecretStr] = Field(default=None, description="API consumer secret")
    per_page: int = Field(default=100, alias="ORDERS_PER_PAGE", description="Orders fetched per page")
    start_date: Optional[str] = Field(default=None, alias="START_DATE", description="Only orders created after this date")
    end_date: Optional[str] = Field(default=None, alias="END_DATE", description="Only orders created before this date")
    order_status: str = Field(default="completed", alias="ORDER_STATUS", description="Comma-separated order statuses")
    timeout_seconds: float = Field(default=30.0, description="HTTP request timeout")

    @property
    def has_credentials(self) -> bool:
        """Whether both API credentials are configured"""
        return bool(self.consumer_key and self.consumer_secret)

    @property
    def statuses(self) -> List[str]:
        """Order statuses to request"""
        return [s.strip() for s in self.order_status.split(",") if s.strip()]


class StoreMappingEntry(BaseModel):
    """Maps a city or state pattern to a store label. A trailing * is a prefix match."""

    store: str
    city_pattern: Optional[str] = None
    state_pattern: Optional[str] = None


class StoreSettings(BaseSettings):
    """Store Identification Configuration"""

    model_config = SettingsConfigDict(env_prefix="STORE_")

    identification_method: str = Field(default="city", description="city, metadata or billing")
    metadata_field: str = Field(default="_store_id", description="Order meta_data key holding the store id")
    mapping: List[StoreMappingEntry] = Field(default_factory=list, description="Pattern to store mapping")

    @field_validator("identification_method")
    @classmethod
    def validate_method(cls, v: str) -> str:
        """Validate identification method"""
        allowed = ["city", "metadata", "billing"]
        if v.lower() not in allowed:
            raise ValueError(f"Store identification method must be one of: {allowed}")
        return v.lower()


class DataLakeSettings(BaseSettings):
    """Raw and processed data locations"""

    model_config = SettingsConfigDict(env_prefix="DATA_")

    raw_path: str = Field(default="./data/raw", description="Raw orders directory")
    processed_path: str = Field(default="./data/processed", description="Generated reports directory")
    raw_orders_file: str = Field(default="orders_raw.json", description="Extracted orders file name")
    report_file: str = Field(default="sales_reports.json", description="Sales report file name")

    @property
    def raw_orders_path(self) -> Path:
        """Full path of the extracted orders file"""
        return Path(self.raw_path) / self.raw_orders_file

    @property
    def report_path(self) -> Path:
        """Full path of the generated sales report"""
        return Path(self.processed_path) / self.report_file


class ReportSettings(BaseSettings):
    """Sales report generation settings"""

    model_config = SettingsConfigDict(env_prefix="REPORT_", populate_by_name=True)

    currency: str = Field(default="EUR", alias="CURRENCY", description="Currency code stamped on reports")
    timezone: str = Field(default="UTC", description="Timezone used for day/week/month buckets")
    top_products_limit: int = Field(default=10, description="Size of the top products ranking")
    top_stores_limit: int = Field(default=10, description="Size of the top stores ranking")
    top_combinations_limit: int = Field(default=20, description="Size of the top product/store ranking")
    cache_ttl_seconds: int = Field(default=300, description="How long a loaded report is served before reloading")


class SecuritySettings(BaseSettings):
    """API rate limiting and CORS"""

    model_config = SettingsConfigDict(env_prefix="", populate_by_name=True)

    rate_limit_requests: int = Field(default=100, alias="RATE_LIMIT_REQUESTS", description="Rate limit requests")
    rate_limit_window_seconds: int = Field(default=60, alias="RATE_LIMIT_WINDOW_SECONDS", description="Rate limit window")
    refresh_rate_limit_requests: int = Field(
        default=5, alias="REFRESH_RATE_LIMIT_REQUESTS", description="Report refreshes allowed per window"
    )
    cors_origins: List[str] = Field(
        default=["http://localhost:3000", "http://localhost:8080"],
        description="Allowed CORS origins"
    )


class MonitoringSettings(BaseSettings):
    """Logging Configuration"""

    model_config = SettingsConfigDict(env_prefix="", populate_by_name=True)

    log_level: str = Field(default="INFO", alias="LOG_LEVEL", description="Logging level")
    log_format: str = Field(default="json", alias="LOG_FORMAT", description="Log format: json or text")


class Settings(BaseSettings):
    """
    Main Application Settings

    Aggregates all configuration sections and provides a single entry point
    for accessing application configuration.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Application
    app_name: str = Field(default="sales-reports", alias="APP_NAME", description="Application name")
    app_env: str = Field(default="development", alias="APP_ENV", description="Environment")
    debug: bool = Field(default=False, alias="DEBUG", description="Debug mode")

    # API Server
    api_host: str = Field(default="0.0.0.0", alias="API_HOST", description="API host")
    api_port: int = Field(default=8000, alias="API_PORT", description="API port")
    api_workers: int = Field(default=2, alias="API_WORKERS", description="API workers")
    api_reload: bool = Field(default=False, alias="API_RELOAD", description="Enable reload")

    # Version
    version: str = Field(default="1.0.0", description="Application version")

    # Subsystem configurations
    woocommerce: WooCommerceSettings = Field(default_factory=WooCommerceSettings)
    stores: StoreSettings = Field(default_factory=StoreSettings)
    data_lake: DataLakeSettings = Field(default_factory=DataLakeSettings)
    report: ReportSettings = Field(default_factory=ReportSettings)
    security: SecuritySettings = Field(default_factory=SecuritySettings)
    monitoring: MonitoringSettings = Field(default_factory=MonitoringSettings)

    @field_validator("app_env")
    @classmethod
    def validate_env(cls, v: str) -> str:
        """Validate environment value"""
        allowed = ["development", "staging", "production", "testing"]
        if v.lower() not in allowed:
            raise ValueError(f"Environment must be one of: {allowed}")
        return v.lower()

    @property
    def is_production(self) -> bool:
        """Check if running in production"""
        return self.app_env == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development"""
        return self.app_env == "development"


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached application settings.

    Uses LRU cache to ensure settings are only loaded once.

    Returns:
        Settings: Application settings instance
    """
    return Settings()


# Convenience function for accessing settings
settings = get_settings()
