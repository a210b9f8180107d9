"""HTTP Basic authentication against an htpasswd file of bcrypt hashes."""

import base64
import binascii
import hashlib
from pathlib import Path
from typing import Dict, Optional

import bcrypt
from fastapi import Header, Request

from common.logging_config import get_logger
from fragments import config
from fragments.exceptions import AuthenticationError, ConfigurationError

logger = get_logger(__name__)


def hash_owner(username: str) -> str:
    """
    Derive the opaque owner id for a user.

    Args:
        username: Login name (usually an email address)

    Returns:
        SHA-256 hex digest, so raw identities never reach storage
    """
    return hashlib.sha256(username.encode("utf-8")).hexdigest()


def verify_password(password: str, password_hash: str) -> bool:
    """
    Verify a password against a bcrypt hash.

    Args:
        password: Plain text password to verify
        password_hash: Bcrypt hash to verify against

    Returns:
        True if password matches hash, False otherwise
    """
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        return False


class HtpasswdAuthenticator:
    """
    Validates Basic credentials against ``username:bcrypt-hash`` lines.
    """

    def __init__(self, users: Dict[str, str]):
        self.users = users

    @classmethod
    def from_file(cls, path: str) -> "HtpasswdAuthenticator":
        htpasswd = Path(path)
        if not htpasswd.is_file():
            raise ConfigurationError(f"htpasswd file not found: {path}")

        users = {}
        for line in htpasswd.read_text().splitlines():
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            username, _, password_hash = line.partition(":")
            if not password_hash.startswith("$2"):
                logger.warning(f"Skipping htpasswd entry for {username}: only bcrypt hashes are supported")
                continue
            users[username] = password_hash

        logger.info(f"Loaded {len(users)} users from htpasswd file")
        return cls(users)

    @classmethod
    def from_config(cls) -> "HtpasswdAuthenticator":
        if not config.HTPASSWD_FILE:
            raise ConfigurationError("missing env vars: no authorization configuration found")
        return cls.from_file(config.HTPASSWD_FILE)

    def authenticate(self, username: str, password: str) -> Optional[str]:
        """
        Returns:
            The owner id for valid credentials, None otherwise
        """
        password_hash = self.users.get(username)
        if password_hash is None or not verify_password(password, password_hash):
            return None
        return hash_owner(username)


def parse_basic_credentials(authorization: Optional[str]) -> tuple[str, str]:
    if not authorization:
        raise AuthenticationError("Authorization header is required")

    scheme, _, encoded = authorization.partition(" ")
    if scheme.lower() != "basic" or not encoded:
        raise AuthenticationError("Invalid authorization header format")

    try:
        decoded = base64.b64decode(encoded.strip(), validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError) as e:
        raise AuthenticationError("Invalid authorization header format") from e

    username, separator, password = decoded.partition(":")
    if not separator:
        raise AuthenticationError("Invalid authorization header format")
    return username, password


async def get_current_user(request: Request, authorization: Optional[str] = Header(None)) -> str:
    """
    FastAPI dependency to validate Basic credentials and return the owner id.

    Raises:
        AuthenticationError: If credentials are missing or invalid
    """
    username, password = parse_basic_credentials(authorization)

    authenticator: HtpasswdAuthenticator = request.app.state.authenticator
    owner_id = authenticator.authenticate(username, password)
    if owner_id is None:
        logger.warning("Authentication failed: invalid credentials")
        raise AuthenticationError("Invalid username or password")

    request.state.user_id = owner_id
    return owner_id
