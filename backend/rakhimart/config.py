"""
rakhimart/config.py - Application configuration and Firebase initialization.

This module defines a Pydantic BaseSettings class to load configuration from environment,
and initializes the Firebase Admin SDK (Firestore DB, Storage) on first use.
All other modules import `settings`, `get_db` and `get_bucket` from here; routers take the
Firestore client through `Depends(get_db)` so tests can swap it out.
"""
from functools import lru_cache
from typing import Optional

import firebase_admin
from firebase_admin import credentials, firestore, storage
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""
    model_config = SettingsConfigDict(
        env_file=".env", case_sensitive=False, extra="ignore", populate_by_name=True
    )

    firebase_cred_file: str = Field("firebase_service_account.json", alias="FIREBASE_CRED_FILE")
    firebase_project_id: str = Field("", alias="FIREBASE_PROJECT_ID")
    firebase_storage_bucket: str = Field("", alias="FIREBASE_STORAGE_BUCKET")
    firebase_collection_prefix: str = Field("", alias="FIREBASE_COLLECTION_PREFIX")

    # Firebase credentials from environment variables (for Cloud Run)
    firebase_private_key_id: Optional[str] = Field(None, alias="FIREBASE_PRIVATE_KEY_ID")
    firebase_private_key: Optional[str] = Field(None, alias="FIREBASE_PRIVATE_KEY")
    firebase_client_email: Optional[str] = Field(None, alias="FIREBASE_CLIENT_EMAIL")
    firebase_client_id: Optional[str] = Field(None, alias="FIREBASE_CLIENT_ID")
    firebase_auth_uri: Optional[str] = Field(None, alias="FIREBASE_AUTH_URI")
    firebase_token_uri: Optional[str] = Field(None, alias="FIREBASE_TOKEN_URI")
    firebase_auth_provider_x509_cert_url: Optional[str] = Field(None, alias="FIREBASE_AUTH_PROVIDER_X509_CERT_URL")
    firebase_client_x509_cert_url: Optional[str] = Field(None, alias="FIREBASE_CLIENT_X509_CERT_URL")

    debug: bool = Field(False, alias="DEBUG")
    allowed_origins: str = Field("*", alias="ALLOWED_ORIGINS")  # Comma-separated list or '*' for all

    # Storefront / checkout
    whatsapp_number: str = Field("", alias="WHATSAPP_NUMBER")
    whatsapp_base_url: str = Field("https://wa.me", alias="WHATSAPP_BASE_URL")
    currency_symbol: str = Field("₹", alias="CURRENCY_SYMBOL")
    placeholder_image: str = Field("/placeholder.svg", alias="PLACEHOLDER_IMAGE")
    default_delivery_charges: str = Field("50", alias="DEFAULT_DELIVERY_CHARGES")
    default_free_delivery_minimum: str = Field("200", alias="DEFAULT_FREE_DELIVERY_MINIMUM")
    products_page_size: int = Field(12, ge=1, alias="PRODUCTS_PAGE_SIZE")

    def collection(self, name: str) -> str:
        """Prefix-aware Firestore collection name."""
        prefix = (self.firebase_collection_prefix or "").strip()
        return f"{prefix}{name}" if prefix else name


# Load settings from environment (.env file, etc.)
settings = Settings()


def _credential(cfg: Settings):
    # Use environment variables for Firebase credentials (Cloud Run)
    if all([
        cfg.firebase_private_key_id,
        cfg.firebase_private_key,
        cfg.firebase_client_email,
        cfg.firebase_client_id,
        cfg.firebase_auth_uri,
        cfg.firebase_token_uri,
        cfg.firebase_auth_provider_x509_cert_url,
        cfg.firebase_client_x509_cert_url,
    ]):
        return credentials.Certificate({
            "type": "service_account",
            "project_id": cfg.firebase_project_id,
            "private_key_id": cfg.firebase_private_key_id,
            "private_key": cfg.firebase_private_key.replace("\\n", "\n"),
            "client_email": cfg.firebase_client_email,
            "client_id": cfg.firebase_client_id,
            "auth_uri": cfg.firebase_auth_uri,
            "token_uri": cfg.firebase_token_uri,
            "auth_provider_x509_cert_url": cfg.firebase_auth_provider_x509_cert_url,
            "client_x509_cert_url": cfg.firebase_client_x509_cert_url,
        })
    # Use service account file (local development)
    return credentials.Certificate(cfg.firebase_cred_file)


@lru_cache(maxsize=1)
def get_firebase_app():
    """Initialize Firebase Admin once; reuse the default app if it already exists."""
    try:
        return firebase_admin.get_app()
    except ValueError:
        return firebase_admin.initialize_app(_credential(settings), {
            "projectId": settings.firebase_project_id,
            "storageBucket": settings.firebase_storage_bucket,
        })


def get_db():
    """Firestore database client."""
    return firestore.client(app=get_firebase_app())


def get_bucket():
    """Default storage bucket (product images)."""
    return storage.bucket(app=get_firebase_app())
