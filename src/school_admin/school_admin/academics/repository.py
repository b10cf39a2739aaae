from __future__ import annotations

from typing import Optional, Protocol

from .model import AcademicYear, ClassRoom


class AcademicRepository(Protocol):
    def get_active_academic_year(self) -> Optional[AcademicYear]:
        raise NotImplementedError

    def get_class(self, class_id: int) -> Optional[ClassRoom]:
        raise NotImplementedError
