from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional


@dataclass(frozen=True)
class AcademicYear:
    academic_year_id: int
    name: str
    start_date: date
    end_date: date
    is_active: bool = True


@dataclass(frozen=True)
class ClassRoom:
    class_id: int
    branch_id: int
    grade_id: int
    name: str
    section: Optional[str]
    capacity: int
