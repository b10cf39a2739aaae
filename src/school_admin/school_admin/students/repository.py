from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol

from .model import ParentContact, Student


class StudentRepository(Protocol):
    def get_by_id(self, student_id: int) -> Optional[Student]:
        raise NotImplementedError

    def get_primary_parent(self, student_id: int) -> Optional[ParentContact]:
        """Primary parent first, otherwise any linked parent."""

        raise NotImplementedError

    def get_parent(self, parent_user_id: int) -> Optional[ParentContact]:
        raise NotImplementedError

    def set_admission_date(self, student_id: int, *, admitted_at: datetime) -> bool:
        raise NotImplementedError
