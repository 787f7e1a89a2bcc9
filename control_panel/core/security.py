# control_panel/core/security.py
import hashlib
import logging
from datetime import datetime, timedelta, timezone
from typing import Dict, Any
from passlib.context import CryptContext
from jose import JWTError, jwt
from control_panel.core.config import SECRET_KEY, ALGORITHM, ACCESS_TOKEN_EXPIRE_MINUTES

logger = logging.getLogger(__name__)

# Use Argon2 for password hashing
pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")

SESSION_PURPOSE = "moderation"

def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verifies a plain password against a hashed password."""
    return pwd_context.verify(plain_password, hashed_password)

def get_password_hash(password: str) -> str:
    """Hashes a password."""
    return pwd_context.hash(password)

def create_access_token(data: dict) -> str:
    """Creates a signed session token for an authorized moderator."""
    to_encode = data.copy()

    now = datetime.now(timezone.utc)
    expire = now + timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode.update({
        "exp": expire,
        "purpose": SESSION_PURPOSE,
        "iat": now,
        "session_id": hashlib.sha256(f"{data.get('sub', '')}{now}{SECRET_KEY}".encode()).hexdigest()[:16]
    })

    encoded_jwt = jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)
    logger.info(f"Session token created for moderator: {data.get('artist_name', 'unknown')}")
    return encoded_jwt

def verify_token(token: str, purpose: str = SESSION_PURPOSE) -> Dict[str, Any]:
    """
    Verify a session token.

    Args:
        token: JWT token string
        purpose: Expected token purpose

    Returns:
        Token payload if valid

    Raises:
        JWTError: If the token is malformed, expired or badly signed
        ValueError: If the token was issued for another purpose
    """
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError as e:
        logger.warning(f"JWT validation failed: {e}")
        raise

    token_purpose = payload.get("purpose")
    if token_purpose != purpose:
        logger.warning(f"Token purpose mismatch. Expected: {purpose}, Got: {token_purpose}")
        raise ValueError("Invalid token purpose")

    return payload
