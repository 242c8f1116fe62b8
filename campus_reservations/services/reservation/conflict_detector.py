"""
Time-slot conflict detection.

Two slots on the same date conflict when their half-open intervals
intersect: ``[s1, e1)`` and ``[s2, e2)`` overlap iff ``s1 < e2 and s2 < e1``.
Back-to-back slots (one ends exactly when the other starts) do not conflict.
"""

from datetime import date, time
from typing import Any, Iterable, List, NamedTuple

from sqlalchemy.orm import Session

from campus_reservations.config.logging import get_logger
from campus_reservations.core.exceptions import ValidationError
from campus_reservations.repositories.reservation import DailySlotRepository
from campus_reservations.schemas.reservation import ConflictItem, SlotConflict
from campus_reservations.utils.datetime_utils import DateTimeHelper


class SlotSpec(NamedTuple):
    """A requested (date, start, end) interval."""

    date: date
    start_time: time
    end_time: time

    def overlaps(self, other: "SlotSpec") -> bool:
        return (
            self.date == other.date
            and self.start_time < other.end_time
            and other.start_time < self.end_time
        )


def _coerce_slot(raw: Any) -> SlotSpec:
    if isinstance(raw, SlotSpec):
        return raw
    if isinstance(raw, dict):
        slot_date = raw.get("date")
        start, end = raw.get("start_time"), raw.get("end_time")
    elif isinstance(raw, (tuple, list)) and len(raw) == 3:
        slot_date, start, end = raw
    else:
        slot_date = getattr(raw, "date", None)
        start, end = getattr(raw, "start_time", None), getattr(raw, "end_time", None)

    if slot_date is None or start is None or end is None:
        raise ValidationError("Each slot requires a date, start time and end time", field="slots")

    try:
        if isinstance(slot_date, str):
            slot_date = date.fromisoformat(slot_date)
        start = DateTimeHelper.parse_time(start)
        end = DateTimeHelper.parse_time(end)
    except (TypeError, ValueError):
        raise ValidationError("Invalid slot date or time format", field="slots")

    return SlotSpec(slot_date, start, end)


def normalize_slots(raw_slots: Iterable[Any], allow_self_overlap: bool = False) -> List[SlotSpec]:
    """
    Validate and canonicalize requested slots.

    - every slot must satisfy ``start_time < end_time``
    - exact duplicates are collapsed
    - the result is sorted by (date, start_time)
    - unless ``allow_self_overlap``, two distinct slots of the same request
      may not overlap each other

    Raises:
        ValidationError: On any malformed or self-overlapping slot
    """
    slots: List[SlotSpec] = []
    seen = set()
    for raw in raw_slots or []:
        slot = _coerce_slot(raw)
        if slot.start_time >= slot.end_time:
            raise ValidationError(
                f"Slot on {slot.date.isoformat()} must end after it starts",
                field="slots",
                details={
                    "date": slot.date.isoformat(),
                    "start_time": slot.start_time.isoformat(),
                    "end_time": slot.end_time.isoformat(),
                },
            )
        if slot in seen:
            continue
        seen.add(slot)
        slots.append(slot)

    slots.sort(key=lambda s: (s.date, s.start_time, s.end_time))

    if not allow_self_overlap:
        for previous, current in zip(slots, slots[1:]):
            if previous.overlaps(current):
                raise ValidationError(
                    "Requested slots overlap each other",
                    field="slots",
                    details={
                        "date": current.date.isoformat(),
                        "first": [previous.start_time.isoformat(), previous.end_time.isoformat()],
                        "second": [current.start_time.isoformat(), current.end_time.isoformat()],
                    },
                )
    return slots


class ConflictDetector:
    """
    Read-only overlap search against active (pending or approved)
    reservations of one resource.
    """

    def __init__(self, db: Session):
        self.slot_repo = DailySlotRepository(db)
        self._logger = get_logger(self.__class__.__name__)

    def find_conflicts(self, resource_id: int, candidate_slots: Iterable[Any]) -> List[SlotConflict]:
        """
        Return one :class:`SlotConflict` per candidate that overlaps an
        existing active reservation. An empty list means every candidate
        is free.

        Raises:
            ValidationError: If a candidate interval is empty or inverted
        """
        conflicts: List[SlotConflict] = []
        for slot in normalize_slots(candidate_slots, allow_self_overlap=True):
            rows = self.slot_repo.find_overlapping(
                resource_id, slot.date, slot.start_time, slot.end_time
            )
            if not rows:
                continue

            items = [
                ConflictItem(
                    reservation_id=reservation.id,
                    purpose=reservation.purpose,
                    status=reservation.status,
                    reserved_by_id=reservation.requester_id,
                    reserved_by=reservation.requester.name if reservation.requester else None,
                    conflict_date=existing.slot_date,
                    conflict_start=existing.start_time,
                    conflict_end=existing.end_time,
                )
                for existing, reservation in rows
            ]
            conflicts.append(
                SlotConflict(
                    date=slot.date,
                    requested_start=slot.start_time,
                    requested_end=slot.end_time,
                    conflicts=items,
                )
            )

        if conflicts:
            self._logger.info(
                f"Found conflicts for {len(conflicts)} requested slot(s) on resource {resource_id}",
                extra={"resource_id": resource_id, "conflicting_slots": len(conflicts)},
            )
        return conflicts
