# app/services/auth_service.py
"""
Admin authentication: bcrypt password hashes, HS256 JWT bearer tokens.

Accounts live in memory for the process lifetime. Login accepts either the
username or the email as identifier. Tokens carry identity + role claims
and expire after TOKEN_TTL_HOURS.
"""

import threading
from datetime import timedelta
from typing import Dict, Optional, Tuple

import bcrypt
import jwt

from app.config import Settings
from app.exceptions import AuthError, ValidationError
from app.models.user import AdminUser
from app.utils.logger import get_logger
from app.utils.time_utils import utc_now

logger = get_logger(__name__)

# bcrypt only looks at the first 72 bytes
_BCRYPT_MAX_BYTES = 72


def hash_password(password: str, rounds: int = 12) -> str:
    return bcrypt.hashpw(password.encode("utf-8")[:_BCRYPT_MAX_BYTES], bcrypt.gensalt(rounds)).decode("utf-8")


def check_password(password: str, password_hash: str) -> bool:
    return bcrypt.checkpw(password.encode("utf-8")[:_BCRYPT_MAX_BYTES], password_hash.encode("utf-8"))


class UserStore:
    def __init__(self):
        self._lock = threading.Lock()
        self._users: Dict[str, AdminUser] = {}
        self._next_id = 1

    def find(self, identifier: str) -> Optional[AdminUser]:
        """Look up by username or email (case-insensitive)."""
        key = identifier.strip().lower()
        with self._lock:
            for user in self._users.values():
                if user.username.lower() == key or user.email.lower() == key:
                    return user
        return None

    def add(self, username: str, email: str, password_hash: str, role: str) -> AdminUser:
        with self._lock:
            for user in self._users.values():
                if user.username.lower() == username.lower() or user.email.lower() == email.lower():
                    raise ValidationError("User already exists")
            user = AdminUser(id=self._next_id, username=username, email=email,
                             password_hash=password_hash, role=role, created_at=utc_now())
            self._users[username.lower()] = user
            self._next_id += 1
            return user

    def __len__(self) -> int:
        return len(self._users)


class AuthService:
    def __init__(self, settings: Settings, users: Optional[UserStore] = None, clock=utc_now):
        self.settings = settings
        self.users = users or UserStore()
        self.clock = clock
        self._dummy_hash: Optional[str] = None

    def _unknown_user_hash(self) -> str:
        # unknown identifiers still pay for one bcrypt check
        if self._dummy_hash is None:
            self._dummy_hash = hash_password("unknown-user", self.settings.BCRYPT_ROUNDS)
        return self._dummy_hash

    def seed_admin(self) -> Optional[AdminUser]:
        """Create the configured admin account, if a password is configured."""
        s = self.settings
        if not s.ADMIN_PASSWORD:
            logger.warning("ADMIN_PASSWORD not set, no admin account seeded")
            return None
        if self.users.find(s.ADMIN_USERNAME):
            return None
        user = self.users.add(s.ADMIN_USERNAME, s.ADMIN_EMAIL,
                              hash_password(s.ADMIN_PASSWORD, s.BCRYPT_ROUNDS), "superadmin")
        logger.info(f"Seeded admin account '{user.username}'")
        return user

    def register(self, username: Optional[str], email: Optional[str], password: Optional[str]) -> AdminUser:
        if not username or not email or not password:
            raise ValidationError("Username, email and password are required")
        if len(password) < self.settings.PASSWORD_MIN_LENGTH:
            raise ValidationError(
                f"Password must be at least {self.settings.PASSWORD_MIN_LENGTH} characters long"
            )
        user = self.users.add(username.strip(), email.strip(),
                              hash_password(password, self.settings.BCRYPT_ROUNDS),
                              self.settings.DEFAULT_USER_ROLE)
        logger.info(f"Registered user '{user.username}' role={user.role}")
        return user

    def authenticate(self, identifier: Optional[str], password: Optional[str]) -> Tuple[str, AdminUser]:
        if not identifier or not password:
            raise ValidationError("Username/email and password are required")
        user = self.users.find(identifier)
        if user is None:
            check_password(password, self._unknown_user_hash())
            valid = False
        else:
            valid = check_password(password, user.password_hash)
        if not valid:
            logger.warning(f"Failed login for '{identifier}'")
            raise AuthError("Invalid credentials")
        logger.info(f"User '{user.username}' logged in")
        return self.issue_token(user), user

    def issue_token(self, user: AdminUser) -> str:
        now = self.clock()
        claims = {
            "sub": str(user.id),
            "username": user.username,
            "email": user.email,
            "role": user.role,
            "iat": now,
            "exp": now + timedelta(hours=self.settings.TOKEN_TTL_HOURS),
        }
        return jwt.encode(claims, self.settings.JWT_SECRET, algorithm=self.settings.JWT_ALGORITHM)

    def verify(self, token: Optional[str]) -> dict:
        if not token:
            raise AuthError("Access token required")
        try:
            return jwt.decode(token, self.settings.JWT_SECRET, algorithms=[self.settings.JWT_ALGORITHM])
        except jwt.InvalidTokenError as e:
            logger.debug(f"Token rejected: {e}")
            raise AuthError("Invalid or expired token")

    def is_admin(self, claims: dict) -> bool:
        return claims.get("role") in self.settings.ADMIN_ROLES
