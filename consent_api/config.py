
import os
from dotenv import load_dotenv

load_dotenv()


def _tenant_url(suffix: str) -> str:
    tenant = os.getenv("AZURE_TENANT_ID", "")
    return f"https://login.microsoftonline.com/{tenant}/{suffix}" if tenant else ""


class Config:
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///local.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = {"pool_pre_ping": True}
    MAX_CONTENT_LENGTH = int(os.getenv("MAX_CONTENT_LENGTH", str(6 * 1024 * 1024)))
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    ALLOW_ORIGIN = os.getenv("ALLOW_ORIGIN", "*")

    # Microsoft Entra bearer tokens
    AZURE_TENANT_ID = os.getenv("AZURE_TENANT_ID", "")
    AZURE_CLIENT_ID = os.getenv("AZURE_CLIENT_ID", "")
    JWKS_URI = os.getenv("JWKS_URI") or _tenant_url("discovery/v2.0/keys")
    TOKEN_ISSUER = os.getenv("TOKEN_ISSUER") or _tenant_url("v2.0")
    JWKS_CACHE_SECONDS = int(os.getenv("JWKS_CACHE_SECONDS", "3600"))
    JWKS_MIN_REFRESH_SECONDS = int(os.getenv("JWKS_MIN_REFRESH_SECONDS", "60"))
    JWKS_TIMEOUT = float(os.getenv("JWKS_TIMEOUT", "5"))

    ADMIN_CLIENT_ID = os.getenv("ADMIN_CLIENT_ID", "")
    ADMIN_CLIENT_SECRET = os.getenv("ADMIN_CLIENT_SECRET", "")

    RESERVATION_FEED_URL = os.getenv("RESERVATION_FEED_URL", "")
    RESERVATION_FEED_API_KEY = os.getenv("RESERVATION_FEED_API_KEY", "")
    RESERVATION_FEED_TIMEOUT = float(os.getenv("RESERVATION_FEED_TIMEOUT", "15"))

    MAX_SIGNATURE_BYTES = int(os.getenv("MAX_SIGNATURE_BYTES", str(2 * 1024 * 1024)))
    CONSENT_CHANNEL = os.getenv("CONSENT_CHANNEL", "Mobile App")
    SEARCH_LIMIT = int(os.getenv("SEARCH_LIMIT", "100"))
