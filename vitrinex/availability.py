from __future__ import annotations
import logging
import re
from dataclasses import asdict, dataclass, field
from datetime import date, datetime
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple

logger = logging.getLogger(__name__)

TIME_RE = re.compile(r"^([01]?\d|2[0-3]):([0-5]\d)$")

# Index matches date.weekday()
DAYS = ["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]

DEFAULT_SLOT_DURATION = 30
MIN_SLOT_DURATION = 5
MAX_SLOT_DURATION = 480


@dataclass
class DayAvailability:
    is_closed: bool
    time_blocks: List[Dict[str, Any]] = field(default_factory=list)
    reason: str = ""
    is_special_day: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


# ----------------- TIME HELPERS ------------------------

def normalize_time(value: Any) -> Optional[str]:
    """Return ``HH:MM`` for ``H:MM``/``HH:MM`` input, ``None`` when invalid."""
    if not isinstance(value, str):
        return None
    match = TIME_RE.match(value.strip())
    if not match:
        return None
    return f"{int(match.group(1)):02d}:{match.group(2)}"


def time_to_minutes(value: str) -> int:
    hours, minutes = value.split(":")
    return int(hours) * 60 + int(minutes)


def minutes_to_time(total: int) -> str:
    return f"{total // 60:02d}:{total % 60:02d}"


def parse_date(value: Any) -> Optional[date]:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None
    try:
        # Full ISO datetimes are accepted, only the calendar day matters
        return date.fromisoformat(value.strip()[:10])
    except ValueError:
        return None


def _duration_or_default(value: Any) -> int:
    try:
        duration = int(value)
    except (TypeError, ValueError):
        return DEFAULT_SLOT_DURATION
    if duration <= 0:
        return DEFAULT_SLOT_DURATION
    return max(MIN_SLOT_DURATION, min(MAX_SLOT_DURATION, duration))


# ----------------- BLOCK VALIDATION ------------------------

def validate_time_block(block: Dict[str, Any]) -> List[str]:
    errors: List[str] = []
    start = normalize_time(block.get("start_time"))
    end = normalize_time(block.get("end_time"))

    if not block.get("start_time"):
        errors.append("start_time is required")
    elif start is None:
        errors.append("start_time is invalid (expected HH:MM)")

    if not block.get("end_time"):
        errors.append("end_time is required")
    elif end is None:
        errors.append("end_time is invalid (expected HH:MM)")

    if start and end and time_to_minutes(start) >= time_to_minutes(end):
        errors.append("start_time must be earlier than end_time")

    duration = block.get("slot_duration")
    if duration is not None:
        try:
            duration = int(duration)
        except (TypeError, ValueError):
            errors.append("slot_duration must be a number of minutes")
        else:
            if duration < MIN_SLOT_DURATION or duration > MAX_SLOT_DURATION:
                errors.append(
                    f"slot_duration must be between {MIN_SLOT_DURATION} and {MAX_SLOT_DURATION} minutes"
                )
    return errors


def _sorted_blocks(blocks: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
    usable = [b for b in blocks if normalize_time(b.get("start_time")) and normalize_time(b.get("end_time"))]
    return sorted(usable, key=lambda b: time_to_minutes(normalize_time(b["start_time"])))


def detect_overlaps(blocks: Iterable[Dict[str, Any]]) -> List[Tuple[str, str]]:
    """Pairs of neighbouring blocks that overlap. Touching blocks are fine."""
    ordered = _sorted_blocks(blocks)
    overlaps = []
    for current, following in zip(ordered, ordered[1:]):
        if time_to_minutes(normalize_time(current["end_time"])) > time_to_minutes(
            normalize_time(following["start_time"])
        ):
            overlaps.append(
                (
                    f"{current['start_time']}-{current['end_time']}",
                    f"{following['start_time']}-{following['end_time']}",
                )
            )
    return overlaps


def merge_blocks(blocks: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Drop blocks contained in an earlier one and fuse overlapping blocks."""
    merged: List[Dict[str, Any]] = []
    for block in _sorted_blocks(blocks):
        start = normalize_time(block["start_time"])
        end = normalize_time(block["end_time"])
        if merged and time_to_minutes(start) < time_to_minutes(merged[-1]["end_time"]):
            last = merged[-1]
            if time_to_minutes(end) > time_to_minutes(last["end_time"]):
                logger.debug(f"Merging block {start}-{end} into {last['start_time']}-{last['end_time']}")
                last["end_time"] = end
            continue
        merged.append(
            {
                "start_time": start,
                "end_time": end,
                "slot_duration": _duration_or_default(block.get("slot_duration")),
            }
        )
    return merged


def _tidy_blocks(blocks: Any) -> List[Dict[str, Any]]:
    if not isinstance(blocks, list):
        return []
    valid = []
    seen = set()
    for block in blocks:
        if not isinstance(block, dict) or validate_time_block(block):
            continue
        key = (normalize_time(block["start_time"]), normalize_time(block["end_time"]))
        if key in seen:
            continue
        seen.add(key)
        valid.append(block)
    cleaned = merge_blocks(valid)
    if detect_overlaps(cleaned):
        logger.warning(f"Overlapping blocks remain after merge: {cleaned}")
    return cleaned


# ----------------- NORMALIZATION ------------------------

def normalize_availability(entries: Any) -> List[Dict[str, Any]]:
    """Clean a weekly schedule submitted by a store owner.

    Unknown weekdays are skipped and the first entry for a weekday wins.
    Closed days carry no blocks. Invalid or duplicated blocks are dropped and
    overlapping ones merged. Legacy ``slots`` lists are kept, normalized and
    sorted. The result is ordered Monday to Sunday.
    """
    if not isinstance(entries, list):
        return []

    by_day: Dict[str, Dict[str, Any]] = {}
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        day = entry.get("day_of_week")
        if day not in DAYS or day in by_day:
            continue

        normalized = {
            "day_of_week": day,
            "is_closed": bool(entry.get("is_closed")),
            "time_blocks": [],
            "slots": [],
        }
        if not normalized["is_closed"]:
            normalized["time_blocks"] = _tidy_blocks(entry.get("time_blocks"))
            legacy = entry.get("slots")
            if isinstance(legacy, list):
                normalized["slots"] = sorted({s for s in map(normalize_time, legacy) if s})
        by_day[day] = normalized

    return [by_day[day] for day in DAYS if day in by_day]


def normalize_special_day(entry: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    day = parse_date(entry.get("date"))
    if day is None:
        return None
    is_closed = bool(entry.get("is_closed"))
    blocks = [] if is_closed else _tidy_blocks(entry.get("time_blocks"))
    # An open day left without usable blocks has nothing to offer
    if not blocks:
        is_closed = True
    return {
        "date": day.isoformat(),
        "is_closed": is_closed,
        "reason": (entry.get("reason") or "").strip(),
        "time_blocks": blocks,
    }


def normalize_special_days(entries: Any) -> List[Dict[str, Any]]:
    if not isinstance(entries, list):
        return []
    by_date: Dict[str, Dict[str, Any]] = {}
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        normalized = normalize_special_day(entry)
        if normalized is None or normalized["date"] in by_date:
            continue
        by_date[normalized["date"]] = normalized
    return [by_date[key] for key in sorted(by_date)]


def legacy_slots_to_blocks(slots: Iterable[Any]) -> List[Dict[str, Any]]:
    """Old schedules listed start times only; cover them with a single block."""
    cleaned = sorted({s for s in map(normalize_time, slots) if s})
    if not cleaned:
        return []
    end = time_to_minutes(cleaned[-1]) + DEFAULT_SLOT_DURATION
    return [
        {
            "start_time": cleaned[0],
            "end_time": minutes_to_time(min(end, 24 * 60 - 1)),
            "slot_duration": DEFAULT_SLOT_DURATION,
        }
    ]


# ----------------- SLOT GENERATION ------------------------

def _intervals(blocks: Iterable[Dict[str, Any]], duration: Optional[int]) -> Iterator[Tuple[int, int]]:
    for block in blocks:
        start = normalize_time(block.get("start_time"))
        end = normalize_time(block.get("end_time"))
        if not start or not end:
            continue
        step = duration or _duration_or_default(block.get("slot_duration"))
        minute, finish = time_to_minutes(start), time_to_minutes(end)
        # A slot is offered only when the whole appointment fits in the block
        while minute + step <= finish:
            yield minute, minute + step
            minute += step


def generate_slots(blocks: Iterable[Dict[str, Any]], duration: Optional[int] = None) -> List[str]:
    """Start times for every block, stepping by ``duration`` or the block's own slot size."""
    return sorted({minutes_to_time(start) for start, _ in _intervals(blocks, duration)})


def availability_for_date(
    day: Any,
    weekly: Optional[List[Dict[str, Any]]] = None,
    special_days: Optional[List[Dict[str, Any]]] = None,
) -> DayAvailability:
    target = parse_date(day)
    if target is None:
        return DayAvailability(is_closed=True, reason="Invalid date")

    for special in special_days or []:
        if parse_date(special.get("date")) == target:
            closed = bool(special.get("is_closed"))
            return DayAvailability(
                is_closed=closed,
                time_blocks=[] if closed else list(special.get("time_blocks") or []),
                reason=special.get("reason") or "",
                is_special_day=True,
            )

    day_name = DAYS[target.weekday()]
    entry = next((e for e in weekly or [] if e.get("day_of_week") == day_name), None)
    if entry is None:
        return DayAvailability(is_closed=True, reason="No schedule configured")
    if entry.get("is_closed"):
        return DayAvailability(is_closed=True, reason="Closed")

    blocks = list(entry.get("time_blocks") or [])
    if not blocks and entry.get("slots"):
        blocks = legacy_slots_to_blocks(entry["slots"])
        logger.debug(f"Migrated legacy slots for {day_name} to {blocks}")
    if not blocks:
        return DayAvailability(is_closed=True, reason="No time blocks configured")

    return DayAvailability(is_closed=False, time_blocks=blocks)


def offered_slots(
    day: Any,
    weekly: Optional[List[Dict[str, Any]]],
    special_days: Optional[List[Dict[str, Any]]],
    duration: Optional[int] = None,
) -> Dict[str, int]:
    """Every slot the schedule offers on ``day`` mapped to its length in minutes."""
    resolved = availability_for_date(day, weekly, special_days)
    if resolved.is_closed:
        return {}
    offered: Dict[str, int] = {}
    for start, end in _intervals(resolved.time_blocks, duration):
        offered.setdefault(minutes_to_time(start), end - start)
    return dict(sorted(offered.items()))


def _booking_interval(booking: Dict[str, Any]) -> Optional[Tuple[int, int]]:
    slot = normalize_time(booking.get("slot"))
    if slot is None:
        return None
    start = time_to_minutes(slot)
    return start, start + _duration_or_default(booking.get("duration"))


def conflicts(slot: str, duration: int, bookings: Iterable[Dict[str, Any]]) -> bool:
    """True when ``slot`` overlaps any non-cancelled booking in ``bookings``."""
    start = time_to_minutes(slot)
    end = start + duration
    for booking in bookings:
        if booking.get("status") == "cancelled":
            continue
        interval = _booking_interval(booking)
        if interval and start < interval[1] and interval[0] < end:
            return True
    return False


def available_slots(
    day: Any,
    weekly: Optional[List[Dict[str, Any]]],
    special_days: Optional[List[Dict[str, Any]]],
    bookings: Iterable[Dict[str, Any]] = (),
    duration: Optional[int] = None,
) -> List[str]:
    resolved = availability_for_date(day, weekly, special_days)
    if resolved.is_closed or not resolved.time_blocks:
        return []

    target = parse_date(day).isoformat()
    same_day = [b for b in bookings if b.get("date") in (None, target)]
    free = []
    for start, end in _intervals(resolved.time_blocks, duration):
        if not conflicts(minutes_to_time(start), end - start, same_day):
            free.append(minutes_to_time(start))
    return sorted(set(free))
