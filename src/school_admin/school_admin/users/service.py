from __future__ import annotations

import logging
from typing import Callable, Optional
from datetime import datetime

from werkzeug.security import check_password_hash

from ..common.datetime_utils import now_local
from ..common.validators import require_non_empty
from ..core.exceptions import AuthenticationError
from .model import SessionUser
from .repository import UserRepository

logger = logging.getLogger(__name__)


class AuthService:
    """Use case: authenticate user (login)."""

    def __init__(self, users: UserRepository, *, clock: Optional[Callable[[], datetime]] = None):
        self._users = users
        self._clock = clock or now_local

    def authenticate(self, email: Optional[str], password: Optional[str]) -> SessionUser:
        email = require_non_empty(email, "Email").lower()
        password = require_non_empty(password, "Password")

        user = self._users.get_by_email(email)
        if not user or not user.is_active:
            raise AuthenticationError("Invalid email or password")

        try:
            ok = check_password_hash(user.password_hash, password)
        except ValueError:
            # e.g. placeholder hashes like 'CHANGE_ME' or corrupted values
            ok = False

        if not ok:
            logger.info("Failed login for %s", email)
            raise AuthenticationError("Invalid email or password")

        self._users.touch_last_login(user.user_id, at=self._clock())
        return SessionUser(
            user_id=user.user_id,
            full_name=user.full_name,
            role=user.role,
            school_id=user.school_id,
            branch_id=user.branch_id,
        )
