"""Environment-driven settings for the ledger API host."""

import os

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./ledger.db")

# Signing key for caller tokens; override in any shared deployment
SECRET_KEY = os.getenv(
    "SECRET_KEY", "5f1c0b7a3e9d48a2b6c4e8f0d2a7b9c1e3f5a7d9b1c3e5f7a9b1d3f5e7c9a1b3"
)
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", str(60 * 24 * 7)))

# Presented as X-API-Key by whoever is allowed to mint caller tokens
TOKEN_ISSUER_KEY = os.getenv("TOKEN_ISSUER_KEY", "dev-issuer-key")

CORS_ALLOWED_ORIGINS = os.getenv("CORS_ALLOWED_ORIGINS", "http://localhost:8000").split(",")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
ENVIRONMENT = os.getenv("ENVIRONMENT", "development")

API_HOST = os.getenv("API_HOST", "127.0.0.1")
API_PORT = int(os.getenv("API_PORT", "8000"))
