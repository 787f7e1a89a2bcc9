# control_panel/core/config.py
import os
import logging
from typing import Optional
from dotenv import load_dotenv

load_dotenv()

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

class ConfigError(Exception):
    """Raised when the environment configuration is invalid"""
    pass

def validate_secret_key(key: Optional[str]) -> str:
    """Validate SECRET_KEY meets security requirements"""
    if not key:
        raise ConfigError("SECRET_KEY environment variable is required")

    if len(key) < 32:
        raise ConfigError("SECRET_KEY must be at least 32 characters long")

    return key

def validate_algorithm(algorithm: Optional[str]) -> str:
    """Validate JWT algorithm is supported"""
    if not algorithm:
        algorithm = "HS256"

    allowed_algorithms = ["HS256", "HS384", "HS512"]
    if algorithm not in allowed_algorithms:
        raise ConfigError(f"Unsupported algorithm: {algorithm}")

    return algorithm

def validate_token_expire_minutes(expire_str: Optional[str]) -> int:
    """Validate session token lifetime"""
    if not expire_str:
        return 60

    try:
        expire_minutes = int(expire_str)
    except ValueError:
        raise ConfigError("ACCESS_TOKEN_EXPIRE_MINUTES must be a valid integer")

    if expire_minutes < 5:
        raise ConfigError("Token expiration too short (minimum 5 minutes)")

    if expire_minutes > 1440:
        logger.warning("Token expiration is very long (>24 hours), consider reducing")

    return expire_minutes

def validate_range_comparison(mode: Optional[str]) -> str:
    """Validate how the approved-range filter compares published ids"""
    if not mode:
        return "numeric"

    mode = mode.lower()
    if mode not in ("numeric", "lexicographic"):
        raise ConfigError(f"Unsupported APPROVED_RANGE_COMPARISON: {mode}")

    return mode

# Database Configuration
MONGO_DATABASE_URL = os.getenv("MONGO_DATABASE_URL")
MONGO_DATABASE_NAME = os.getenv("MONGO_DATABASE_NAME", "nolabel_db")

if not MONGO_DATABASE_URL:
    raise ConfigError("MONGO_DATABASE_URL environment variable is required")

try:
    SECRET_KEY = validate_secret_key(os.getenv("SECRET_KEY"))
    ALGORITHM = validate_algorithm(os.getenv("ALGORITHM"))
    ACCESS_TOKEN_EXPIRE_MINUTES = validate_token_expire_minutes(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES"))
    APPROVED_RANGE_COMPARISON = validate_range_comparison(os.getenv("APPROVED_RANGE_COMPARISON"))

    IS_PRODUCTION = os.getenv("ENVIRONMENT", "development").lower() == "production"
    SECURE_COOKIES = os.getenv("SECURE_COOKIES", "true" if IS_PRODUCTION else "false").lower() == "true"

    logger.info("Configuration validated successfully")

except ConfigError as e:
    logger.error(f"Configuration error: {e}")
    raise
except Exception as e:
    logger.error(f"Unexpected configuration error: {e}")
    raise ConfigError(f"Configuration validation failed: {e}")

# Collections
USERS_COLLECTION = "users"
PROFILES_COLLECTION = "profiles"
MODERATORS_COLLECTION = "allowed_moderators"
PENDING_COLLECTION = "pending_tracks"
PUBLISHED_COLLECTION = "audio_tracks"

# Published catalog ids
PUBLISHED_ID_PREFIX = "audio-"
LEGACY_RANGE_TOP = 20  # audio-0 .. audio-20 predate moderation
APPROVED_MIN_ID = f"{PUBLISHED_ID_PREFIX}{LEGACY_RANGE_TOP + 1}"

# Defaults applied when a submission is published
DEFAULT_ARTIST_LINK = "#"
DEFAULT_BUY_LINK = "notforsale.html"
PLACEHOLDER_COVER = "https://via.placeholder.com/48"

SECURITY_HEADERS = {
    "Cache-Control": "no-store, private",
    "Referrer-Policy": "no-referrer",
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Strict-Transport-Security": "max-age=31536000; includeSubDomains" if IS_PRODUCTION else None,
}

# Audio previews come from the storage bucket, so media and images allow https
CSP_POLICY = (
    "default-src 'self'; "
    "img-src 'self' data: https:; "
    "style-src 'self' 'unsafe-inline'; "
    "script-src 'self' 'unsafe-inline'; "
    "media-src 'self' https: blob:; "
    "object-src 'none'; "
    "frame-ancestors 'none';"
)

RATE_LIMITS = {
    "auth": "5/minute",
    "moderation": "30/minute",
    "default": "100/minute"
}
