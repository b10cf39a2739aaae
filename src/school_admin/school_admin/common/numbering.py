from __future__ import annotations

from datetime import datetime
from typing import Protocol

from ..core.constants import REGISTRATION_PREFIX, REGISTRATION_SEQUENCE_WIDTH, SEQUENCE_WIDTH


class SequenceRepository(Protocol):
    def next_value(self, name: str) -> int:
        """Atomically increment and return the named counter (first value is 1)."""

        raise NotImplementedError


def format_document_number(prefix: str, sequence: int, *, at: datetime, width: int = SEQUENCE_WIDTH) -> str:
    """``PREFIX-{epochMillis}-{sequence}``, e.g. ``INV-1718000000000-0042``."""
    epoch_millis = int(at.timestamp() * 1000)
    return f"{prefix}-{epoch_millis}-{int(sequence):0{width}d}"


class DocumentNumberGenerator:
    """Human-readable numbers backed by atomic counters.

    Must be called inside the caller's transaction so that a rolled back write
    also gives its counter increment back.
    """

    def __init__(self, sequences: SequenceRepository):
        self._sequences = sequences

    def next_document_number(self, prefix: str, *, at: datetime) -> str:
        seq = self._sequences.next_value(prefix.lower())
        return format_document_number(prefix, seq, at=at)

    def next_registration_number(self, *, branch_id: int) -> str:
        seq = self._sequences.next_value(f"registration:{int(branch_id)}")
        return f"{REGISTRATION_PREFIX}-B{int(branch_id)}-{seq:0{REGISTRATION_SEQUENCE_WIDTH}d}"
