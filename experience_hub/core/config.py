import os
from os import getenv
from dotenv import load_dotenv

load_dotenv(os.path.join(os.getcwd(), ".env"))


DATABASE_URL = getenv("DATABASE_URL") or "sqlite:///./experience_hub.db"
JWT_SECRET_KEY = getenv("JWT_SECRET_KEY") or ""
DEBUG = (getenv("DEBUG") or "false").lower() in ("1", "true", "yes")

# 30 days, matches the identity provider session lifetime
ACCESS_TOKEN_EXPIRE_MINUTES = int(getenv("ACCESS_TOKEN_EXPIRE_MINUTES") or "43200")

GITHUB_API_URL = getenv("GITHUB_API_URL") or "https://api.github.com"
GITHUB_API_TIMEOUT = int(getenv("GITHUB_API_TIMEOUT") or "10")

# "upsert" (last write wins) or "reject" (409 on a repeated rating/reaction)
INTERACTION_DUPLICATE_POLICY = getenv("INTERACTION_DUPLICATE_POLICY") or "upsert"

CORS_ORIGINS = [
    origin.strip()
    for origin in (getenv("CORS_ORIGINS") or "*").split(",")
    if origin.strip()
]

# Soft-deleted experiences, prompts and comments older than this are purged
SOFT_DELETE_RETENTION_DAYS = int(getenv("SOFT_DELETE_RETENTION_DAYS") or "30")


def validate_settings():
    """Fail fast on settings that have no safe default"""
    if not JWT_SECRET_KEY.strip():
        raise RuntimeError("JWT_SECRET_KEY must be set to sign access tokens")
