"""
Dose Occurrence Materializer
Turns weekly schedules into today's concrete dose occurrences and
lazily creates their backing dose-log rows
"""

import logging
from typing import Dict, List, Optional, Any, Iterable, Tuple
from dataclasses import dataclass, field
from datetime import datetime, date, time, timedelta

from config import dose_config
from models import DoseStatus
from exceptions import InvalidTransitionError


logger = logging.getLogger(__name__)


# Who may move a pending dose into each terminal state
PATIENT_TRANSITIONS = {DoseStatus.TAKEN, DoseStatus.SKIPPED}
SYSTEM_TRANSITIONS = {DoseStatus.MISSED}


def _ensure_time(val) -> time:
    """Accept a time object or an 'HH:MM' / 'HH:MM:SS' string"""
    if isinstance(val, time):
        return val
    if isinstance(val, str):
        for fmt in ("%H:%M", "%H:%M:%S"):
            try:
                return datetime.strptime(val, fmt).time()
            except ValueError:
                continue
        raise ValueError(f"Cannot parse schedule time: {val}")
    raise TypeError(f"Unsupported schedule time type: {type(val)}")


def weekday_index(moment: datetime) -> int:
    """Day of week with 0=Sunday .. 6=Saturday"""
    return (moment.weekday() + 1) % 7


def truncate_to_minute(moment: datetime) -> datetime:
    return moment.replace(second=0, microsecond=0)


def compose_scheduled_time(day: date, time_of_day) -> datetime:
    """
    Wall-clock composition of a calendar day and a schedule's time of day.
    No timezone conversion is applied.
    """
    return truncate_to_minute(datetime.combine(day, _ensure_time(time_of_day)))


def occurs_on(schedule, weekday: int) -> bool:
    """Whether an active schedule applies on the given weekday index"""
    if not schedule.active:
        return False
    return weekday in {int(d) for d in (schedule.days_of_week or [])}


def is_imminent(
    scheduled_time: datetime,
    now: datetime,
    window_minutes: int = dose_config.MATERIALIZE_WINDOW_MINUTES
) -> bool:
    """Due within the window, or already past due"""
    return scheduled_time - now < timedelta(minutes=window_minutes)


def compliance_percent(taken: int, total: int) -> int:
    """round(100 * taken / total), halves rounded up; 100 when there is nothing to take"""
    if total <= 0:
        return 100
    return (200 * taken + total) // (2 * total)


def validate_transition(current: DoseStatus, target: DoseStatus, system: bool = False) -> None:
    """
    Raise InvalidTransitionError unless a dose may move from current to target.

    Only pending doses move. Patients record taken/skipped; missed is
    reserved for the background monitor.
    """
    current = DoseStatus(current)
    target = DoseStatus(target)

    if current.is_terminal:
        raise InvalidTransitionError(
            f"Dose is already {current.value}; cannot mark it {target.value}"
        )

    allowed = SYSTEM_TRANSITIONS if system else PATIENT_TRANSITIONS
    if target not in allowed:
        raise InvalidTransitionError(
            f"Cannot move a pending dose to {target.value}"
        )


@dataclass
class DoseOccurrence:
    """One schedule on one calendar day, with its log row once materialized"""
    medication: Any
    schedule: Any
    scheduled_time: datetime
    dose_log: Optional[Any] = None

    @property
    def key(self) -> Tuple[int, datetime]:
        return (self.schedule.id, self.scheduled_time)

    @property
    def is_materialized(self) -> bool:
        return self.dose_log is not None

    @property
    def status(self) -> Optional[DoseStatus]:
        if self.dose_log is None:
            return None
        return DoseStatus(self.dose_log.status)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "schedule_id": self.schedule.id,
            "medication_id": self.medication.id,
            "medication_name": self.medication.name,
            "dosage": self.medication.dosage,
            "instructions": self.medication.instructions or "",
            "scheduled_time": self.scheduled_time,
            "dose_log_id": self.dose_log.id if self.dose_log else None,
            "status": self.status.value if self.status else None,
            "taken_at": self.dose_log.taken_at if self.dose_log else None,
        }


@dataclass
class MaterializationResult:
    """Outcome of one materialization pass"""
    now: datetime
    occurrences: List[DoseOccurrence] = field(default_factory=list)
    deferred: List[DoseOccurrence] = field(default_factory=list)
    created: int = 0

    def nearest(self, limit: int = dose_config.UPCOMING_DOSE_LIMIT) -> List[DoseOccurrence]:
        return self.occurrences[:limit]


def compute_occurrences(now: datetime, medications: Iterable[Any]) -> List[DoseOccurrence]:
    """
    All of today's occurrences for the given medications, sorted by time.
    Pure: no lookups and no writes.
    """
    today = weekday_index(now)
    occurrences = []

    for medication in medications:
        if not medication.active:
            continue
        for schedule in medication.schedules:
            if not occurs_on(schedule, today):
                continue
            occurrences.append(DoseOccurrence(
                medication=medication,
                schedule=schedule,
                scheduled_time=compose_scheduled_time(now.date(), schedule.time)
            ))

    occurrences.sort(key=lambda o: o.scheduled_time)
    return occurrences


class DoseMaterializer:
    """
    Reconciles today's occurrences with persisted dose logs.

    The store is any object exposing the async methods
    ``find_dose_log(schedule_id, window_start, window_end, db=None)`` and
    ``insert_dose_log(schedule_id, scheduled_time, db=None)``; the latter
    returns ``(row, created)`` and hands back the existing row with
    ``created=False`` when the occurrence was inserted concurrently.
    """

    def __init__(
        self,
        store,
        window_minutes: int = dose_config.MATERIALIZE_WINDOW_MINUTES,
        dedup_seconds: int = dose_config.DEDUP_WINDOW_SECONDS
    ):
        self.store = store
        self.window_minutes = window_minutes
        self.dedup_window = timedelta(seconds=dedup_seconds)

    async def materialize(
        self,
        now: datetime,
        medications: Iterable[Any],
        create_missing: bool = True,
        db=None
    ) -> MaterializationResult:
        """
        Run one pass for the given moment.

        Existing logs are attached to their occurrence. Missing logs are
        created only for imminent or past-due occurrences; later ones are
        returned as deferred. With create_missing=False the pass is
        read-only and every unlogged occurrence is deferred.
        """
        result = MaterializationResult(now=now)

        for occurrence in compute_occurrences(now, medications):
            existing = await self.store.find_dose_log(
                occurrence.schedule.id,
                occurrence.scheduled_time,
                occurrence.scheduled_time + self.dedup_window,
                db=db
            )

            if existing is not None:
                occurrence.dose_log = existing
            elif create_missing and is_imminent(occurrence.scheduled_time, now, self.window_minutes):
                occurrence.dose_log, created = await self.store.insert_dose_log(
                    occurrence.schedule.id,
                    occurrence.scheduled_time,
                    db=db
                )
                if created:
                    result.created += 1
            else:
                result.deferred.append(occurrence)
                continue

            result.occurrences.append(occurrence)

        if result.created:
            logger.info(
                f"Materialized {result.created} dose log(s) at {now.isoformat()}"
            )
        return result
