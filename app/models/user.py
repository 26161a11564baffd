# app/models/user.py
"""Admin accounts held by the auth service."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class AdminUser:
    id: int
    username: str
    email: str
    password_hash: str
    role: str
    created_at: datetime

    def public_dict(self) -> dict:
        return {
            "id": self.id,
            "username": self.username,
            "email": self.email,
            "role": self.role,
            "createdAt": self.created_at.isoformat(),
        }

    def __repr__(self):
        return f"<AdminUser {self.username} role={self.role}>"
