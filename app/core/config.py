"""
Core configuration and settings for the Product Catalog Service
Following FastAPI best practices for configuration management
"""

from dataclasses import dataclass
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


@dataclass(frozen=True)
class CatalogProfile:
    """Optional product fields (and the filters built on them) enabled for a deployment"""
    active: bool = True
    sku: bool = True
    expiry: bool = False


class Config(BaseSettings):
    """Application configuration with environment variable support"""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # Service information
    service_name: str = Field(default="product-catalog-service")
    service_version: str = Field(default="1.0.0")
    environment: str = Field(default="development")

    # Server configuration
    port: int = Field(default=3000)
    host: str = Field(default="0.0.0.0")

    # Database configuration
    mongodb_host: str = Field(default="localhost")
    mongodb_port: int = Field(default=27017)
    mongodb_username: Optional[str] = Field(default=None)
    mongodb_password: Optional[str] = Field(default=None)
    mongodb_database: str = Field(default="catalogdb")
    mongodb_collection: str = Field(default="products")

    @property
    def mongodb_url(self) -> str:
        """Construct MongoDB connection URL"""
        if self.mongodb_username and self.mongodb_password:
            return (
                f"mongodb://{self.mongodb_username}:{self.mongodb_password}"
                f"@{self.mongodb_host}:{self.mongodb_port}/{self.mongodb_database}?authSource=admin"
            )
        return f"mongodb://{self.mongodb_host}:{self.mongodb_port}/{self.mongodb_database}"

    # Logging configuration
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="console")
    log_to_file: bool = Field(default=False)
    log_to_console: bool = Field(default=True)
    log_file_path: str = Field(default="logs/product-catalog-service.log")

    # Request tracing
    correlation_id_header: str = Field(default="X-Correlation-ID")
    tracing_enabled: bool = Field(default=True)

    # JWT verification (tokens are issued elsewhere)
    jwt_secret: str = Field(default="change_me_jwt_secret")
    jwt_algorithm: str = Field(default="HS256")

    # Catalog profile
    catalog_enable_active: bool = Field(default=True)
    catalog_enable_sku: bool = Field(default=True)
    catalog_enable_expiry: bool = Field(default=False)

    @property
    def catalog_profile(self) -> CatalogProfile:
        return CatalogProfile(
            active=self.catalog_enable_active,
            sku=self.catalog_enable_sku,
            expiry=self.catalog_enable_expiry,
        )


# Global config instance
config = Config()
