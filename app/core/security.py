"""
Security utilities for the application.
This module provides functions for password hashing and verification,
and JWT token creation and verification.
"""
import secrets
from typing import Optional, Union, Any, Dict
from datetime import datetime, timedelta, timezone
from jose import jwt, JWTError
from passlib.context import CryptContext
from app.core.config import settings
from app.core.logging import logger

# Password context for hashing and verification
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TokenManager:
    """JWT access token management."""

    @staticmethod
    def new_session_token() -> str:
        """Return a fresh identifier used as both session key and ``jti``."""
        return secrets.token_hex(16)

    @staticmethod
    def create_access_token(
        subject: Union[str, Any],
        session_token: str,
        expires_delta: Optional[timedelta] = None,
        additional_claims: Optional[Dict[str, Any]] = None
    ) -> str:
        """
        Create a JWT access token bound to a server-side session.

        Args:
            subject: The subject to encode in the token (the username)
            session_token: Session identifier stored as the ``jti`` claim
            expires_delta: Optional expiration time delta
            additional_claims: Optional additional claims to include

        Returns:
            Encoded JWT token
        """
        now = utcnow()
        if expires_delta:
            expire = now + expires_delta
        else:
            expire = now + timedelta(
                minutes=settings.security.access_token_expire_minutes
            )

        to_encode = {
            "exp": expire,
            "iat": now,
            "sub": str(subject),
            "type": "access",
            "jti": session_token,
        }

        if additional_claims:
            to_encode.update(additional_claims)

        encoded_jwt = jwt.encode(
            to_encode,
            settings.security.secret_key_str,
            algorithm=settings.security.algorithm
        )

        logger.debug(f"Created access token for subject: {subject}")
        return encoded_jwt

    @staticmethod
    def verify_token(token: str, token_type: str = "access") -> Optional[Dict[str, Any]]:
        """
        Verify and decode JWT token.

        Signature and expiry are checked by ``jwt.decode``.

        Args:
            token: JWT token to verify
            token_type: Expected token type

        Returns:
            Decoded token payload or None if invalid
        """
        try:
            payload = jwt.decode(
                token,
                settings.security.secret_key_str,
                algorithms=[settings.security.algorithm]
            )
        except JWTError as e:
            logger.warning(f"JWT verification error: {e}")
            return None

        if payload.get("type") != token_type:
            logger.warning(f"Invalid token type: expected {token_type}, got {payload.get('type')}")
            return None
        if not payload.get("sub") or not payload.get("jti"):
            logger.warning("Token is missing subject or session id")
            return None

        return payload

class PasswordManager:
    """Password management utilities."""

    @staticmethod
    def verify_password(plain_password: str, hashed_password: str) -> bool:
        """
        Verify a password against a hash.

        Args:
            plain_password: The plain text password
            hashed_password: The hashed password

        Returns:
            True if password matches hash, False otherwise
        """
        try:
            return pwd_context.verify(plain_password, hashed_password)
        except (ValueError, TypeError) as e:
            logger.error(f"Password verification error: {e}")
            return False

    @staticmethod
    def get_password_hash(password: str) -> str:
        """
        Generate a password hash.

        Args:
            password: The plain text password

        Returns:
            Hashed password
        """
        return pwd_context.hash(password)
