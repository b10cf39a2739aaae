from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol

from .model import User


class UserRepository(Protocol):
    def get_by_id(self, user_id: int) -> Optional[User]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[User]:
        raise NotImplementedError

    def touch_last_login(self, user_id: int, *, at: datetime) -> None:
        raise NotImplementedError
