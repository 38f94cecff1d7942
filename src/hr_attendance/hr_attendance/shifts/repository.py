from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import WorkShift


class WorkShiftRepository(Protocol):
    def get_by_id(self, shift_id: int) -> Optional[WorkShift]:
        raise NotImplementedError

    def list_active(self) -> Sequence[WorkShift]:
        raise NotImplementedError
