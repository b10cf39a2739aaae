from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class Student:
    student_id: int
    student_code: str
    user_id: int
    first_name: str
    last_name: str
    branch_id: int
    grade_id: int
    branch_name: str = ""
    grade_name: str = ""
    email: Optional[str] = None
    phone: Optional[str] = None
    admission_date: Optional[datetime] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


@dataclass(frozen=True)
class ParentContact:
    parent_user_id: int
    full_name: str
    phone: Optional[str]
