from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import OfficeLocation


class OfficeLocationRepository(Protocol):
    def get_by_id(self, office_location_id: int) -> Optional[OfficeLocation]:
        raise NotImplementedError

    def list_all(self) -> Sequence[OfficeLocation]:
        raise NotImplementedError
