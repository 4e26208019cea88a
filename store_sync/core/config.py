"""Merchant Service Configuration"""

import os
from typing import Optional
from functools import lru_cache

from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load environment variables
load_dotenv()

DEFAULT_CATALOG_PATH = os.path.normpath(os.path.join(
    os.path.dirname(__file__), "..", "data", "product_catalog.csv"
))


class Settings(BaseSettings):
    """Application settings loaded from environment"""

    # Application
    app_name: str = "PP Store Sync Merchant API"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 3000

    # Public storefront, used in order confirmation links
    store_url: str = "https://www.pp-store-sync.railway.app"

    # Product feed republished for PayPal Store Sync
    catalog_path: str = DEFAULT_CATALOG_PATH

    # PayPal Configuration
    paypal_environment: str = "SANDBOX"
    paypal_jwt_strict: bool = False
    paypal_client_id: Optional[str] = None
    paypal_client_secret: Optional[str] = None

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def is_production(self) -> bool:
        return self.paypal_environment.upper() == "PRODUCTION"

    @property
    def paypal_base_url(self) -> str:
        """Orders/OAuth API host for the selected environment"""
        if self.is_production:
            return "https://api-m.paypal.com"
        return "https://api-m.sandbox.paypal.com"

    @property
    def paypal_jwks_uri(self) -> str:
        """Public key set used to verify PayPal-issued bearer tokens"""
        if self.is_production:
            return "https://api.paypal.com/v1/oauth2/certs"
        return "https://api.sandbox.paypal.com/v1/oauth2/certs"

    @property
    def paypal_credentials_configured(self) -> bool:
        """Check if PayPal client credentials are configured"""
        return all([self.paypal_client_id, self.paypal_client_secret])


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


settings = get_settings()
