from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class User:
    """Domain entity: User.

    Plain data object (no DB access code).
    """

    user_id: int
    email: str
    password_hash: str
    first_name: str
    last_name: str
    role: Role
    school_id: Optional[int]
    branch_id: Optional[int]
    phone: Optional[str] = None
    is_active: bool = True

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


@dataclass(frozen=True)
class SessionUser:
    """What we store into the Flask session after login (the acting user)."""

    user_id: int
    full_name: str
    role: Role
    school_id: Optional[int]
    branch_id: Optional[int]

    def to_session(self) -> dict:
        return {
            "user_id": self.user_id,
            "name": self.full_name,
            "role": self.role.value,
            "school_id": self.school_id,
            "branch_id": self.branch_id,
        }

    @classmethod
    def from_session(cls, data) -> Optional["SessionUser"]:
        if not data or "user_id" not in data:
            return None
        return cls(
            user_id=int(data["user_id"]),
            full_name=data.get("name") or "",
            role=Role(data["role"]),
            school_id=data.get("school_id"),
            branch_id=data.get("branch_id"),
        )
