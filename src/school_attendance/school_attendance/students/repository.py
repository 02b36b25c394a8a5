from __future__ import annotations

from typing import Optional, Protocol

from .model import Student


class StudentRepository(Protocol):
    def get_by_id(self, student_id: int) -> Optional[Student]:
        raise NotImplementedError

    def get_by_card(self, *, school_id: int, card_id: str) -> Optional[Student]:
        """Active student of the school holding the RFID card."""

        raise NotImplementedError
