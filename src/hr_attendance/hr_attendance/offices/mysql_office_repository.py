from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

from ..core.enums import OfficeType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, optional_float
from .model import OfficeLocation
from .repository import OfficeLocationRepository

_COLUMNS = "office_location_id, office_name, office_address, latitude, longitude, office_type, branch_code"


def _to_office(r: Dict[str, Any]) -> OfficeLocation:
    return OfficeLocation(
        office_location_id=int(r["office_location_id"]),
        office_name=r["office_name"],
        office_address=r["office_address"],
        latitude=optional_float(r.get("latitude")),
        longitude=optional_float(r.get("longitude")),
        office_type=OfficeType(r.get("office_type") or OfficeType.OFFICE.value),
        branch_code=r.get("branch_code"),
    )


class MySQLOfficeLocationRepository(OfficeLocationRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, office_location_id: int) -> Optional[OfficeLocation]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM office_locations WHERE office_location_id=%s",
                (int(office_location_id),),
            )
            r = fetchone(cur)
            return _to_office(r) if r else None

    def list_all(self) -> Sequence[OfficeLocation]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM office_locations ORDER BY office_name")
            return [_to_office(r) for r in fetchall(cur)]
