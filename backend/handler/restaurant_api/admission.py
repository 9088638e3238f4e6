"""Reservation admission: validate, check the table, check overlaps, commit.

The overlap query and the insert are two separate store calls. Two concurrent
requests for overlapping slots on one table can both pass the check.
"""

import logging
import uuid
from typing import Any, Callable, Dict

from .errors import ConflictError, NotFoundError, ValidationError
from .validation import coerce_table_id, ensure, is_valid_date, is_valid_time, overlaps, require_fields

logger = logging.getLogger(__name__)

RESERVATION_FIELDS = ("tableNumber", "clientName", "phoneNumber", "date", "slotTimeStart", "slotTimeEnd")


def new_reservation_id() -> str:
    return str(uuid.uuid4())


class ReservationAdmission:
    def __init__(self, tables, reservations, id_factory: Callable[[], str] = new_reservation_id):
        self.tables = tables
        self.reservations = reservations
        self.id_factory = id_factory

    def validate(self, data: Dict[str, Any]) -> Dict[str, Any]:
        require_fields(data, RESERVATION_FIELDS)
        ensure(is_valid_date(data["date"]), "invalid date format", field="date")
        start, end = data["slotTimeStart"], data["slotTimeEnd"]
        if not (is_valid_time(start) and is_valid_time(end)):
            raise ValidationError("invalid time format")
        ensure(start < end, "end time must be after start time", field="slotTimeEnd")
        return {
            "tableNumber": coerce_table_id(data["tableNumber"], field="tableNumber"),
            "clientName": str(data["clientName"]).strip(),
            "phoneNumber": str(data["phoneNumber"]).strip(),
            "date": data["date"],
            "slotTimeStart": start,
            "slotTimeEnd": end,
        }

    def admit(self, data: Dict[str, Any]) -> str:
        request = self.validate(data)
        table_id = request["tableNumber"]

        if self.tables.get(table_id) is None:
            raise NotFoundError("table does not exist")

        existing = self.reservations.find_for_slot(table_id, request["date"], starting_before=request["slotTimeEnd"])
        for other in existing:
            if overlaps(request["slotTimeStart"], request["slotTimeEnd"], other["slotTimeStart"], other["slotTimeEnd"]):
                logger.info(
                    "Table %s on %s: %s-%s overlaps reservation %s",
                    table_id, request["date"], request["slotTimeStart"], request["slotTimeEnd"],
                    other.get("reservationId"),
                )
                raise ConflictError("overlapping reservation")

        reservation_id = self.id_factory()
        self.reservations.insert({"reservationId": reservation_id, **request})
        logger.info("Reservation %s created for table %s", reservation_id, table_id)
        return reservation_id
