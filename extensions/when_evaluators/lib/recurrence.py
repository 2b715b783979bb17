# SPDX-FileCopyrightText: 2025 Eric Löffler <eric.loeffler@opalia.systems>
# SPDX-License-Identifier: GPL-3.0-or-later

import json
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Tuple

from lib_helpers.predictor import Predictor
from lib_helpers.rotor import LAST_DAY_OF_MONTH, DayConstraint


@dataclass(frozen=True)
class FieldSpec:
    name: str
    low: int
    high: int
    names: Tuple[str, ...] = ()


MINUTES = FieldSpec("minutes", 0, 59)
HOURS = FieldSpec("hours", 0, 23)
DAYS = FieldSpec("days", 1, 31)
MONTHS = FieldSpec("months", 1, 12,
                   ("JAN", "FEB", "MAR", "APR", "MAY", "JUN", "JUL", "AUG", "SEP", "OCT", "NOV", "DEC"))
WEEK_DAYS = FieldSpec("week_days", 1, 7, ("MON", "TUE", "WED", "THU", "FRI", "SAT", "SUN"))

# task setting names, both spellings are in use
SETTING_KEYS: Dict[str, FieldSpec] = {
    "cron-minutes": MINUTES,
    "cronMinutes": MINUTES,
    "cron-hours": HOURS,
    "cronHours": HOURS,
    "cron-days": DAYS,
    "cronDays": DAYS,
    "cron-months": MONTHS,
    "cronMonths": MONTHS,
    "cron-days-of-week": WEEK_DAYS,
    "cronDaysOfWeek": WEEK_DAYS,
}

# text form, cron field order
TEXT_FIELDS = (MINUTES, HOURS, DAYS, MONTHS, WEEK_DAYS)

_TERM = re.compile(r"^(?P<range>\*|[0-9A-Za-z]+(?:-[0-9A-Za-z]+)?)(?:/(?P<step>[0-9]+))?$")


@dataclass(frozen=True)
class Recurrence:
    months: Tuple[int, ...] = ()
    days: Tuple[DayConstraint, ...] = ()
    week_days: Tuple[int, ...] = ()
    hours: Tuple[int, ...] = ()
    minutes: Tuple[int, ...] = ()

    def predictor(self) -> Predictor:
        return Predictor(months=self.months,
                         days=self.days,
                         week_days=self.week_days,
                         hours=self.hours,
                         minutes=self.minutes)


def _is_last_day(field: FieldSpec, token: Any) -> bool:
    if field is not DAYS:
        return False
    if isinstance(token, str):
        return token.strip().upper() in ("L", "LAST", str(LAST_DAY_OF_MONTH.value))
    return token == LAST_DAY_OF_MONTH.value


def _to_int(field: FieldSpec, token: str) -> int:
    token = token.strip().upper()
    if token in field.names:
        return field.names.index(token) + field.low
    try:
        value = int(token)
    except ValueError:
        raise ValueError(f"{field.name}: '{token}' is not a number") from None
    return _checked(field, value)


def _checked(field: FieldSpec, value: int) -> int:
    if not field.low <= value <= field.high:
        raise ValueError(f"{field.name}: {value} is outside {field.low}..{field.high}")
    return value


def _parse_json_values(field: FieldSpec, raw: Any) -> List[DayConstraint]:
    if not isinstance(raw, list):
        raise ValueError(f"{field.name}: expected a list, got {type(raw).__name__}")

    values: List[DayConstraint] = []
    for item in raw:
        if _is_last_day(field, item):
            values.append(LAST_DAY_OF_MONTH)
        elif isinstance(item, bool) or not isinstance(item, int):
            raise ValueError(f"{field.name}: {item!r} is not an integer")
        else:
            values.append(_checked(field, item))
    return values


def _parse_text_field(field: FieldSpec, text: str) -> List[DayConstraint]:
    if text == "*":
        return []

    values: List[DayConstraint] = []
    for term in text.split(","):
        if _is_last_day(field, term):
            values.append(LAST_DAY_OF_MONTH)
            continue

        match = _TERM.match(term.strip())
        if match is None:
            raise ValueError(f"{field.name}: cannot parse '{term}'")

        span = match.group("range")
        if span == "*":
            first, last = field.low, field.high
        elif "-" in span:
            lo, hi = span.split("-", 1)
            first, last = _to_int(field, lo), _to_int(field, hi)
        else:
            first = last = _to_int(field, span)

        step = int(match.group("step")) if match.group("step") else 1
        if step < 1:
            raise ValueError(f"{field.name}: step must be positive in '{term}'")
        if first > last:
            raise ValueError(f"{field.name}: empty range '{term}'")
        # 'a/s' means 'a-high/s' like in cron
        if match.group("step") and span != "*" and "-" not in span:
            last = field.high

        values.extend(range(first, last + 1, step))
    return values


def _normalized(values: List[DayConstraint]) -> Tuple[DayConstraint, ...]:
    ints = sorted({v for v in values if isinstance(v, int)})
    markers = [LAST_DAY_OF_MONTH] if LAST_DAY_OF_MONTH in values else []
    return tuple(ints) + tuple(markers)


def _build(fields: Dict[FieldSpec, List[DayConstraint]]) -> Recurrence:
    return Recurrence(months=_normalized(fields.get(MONTHS, [])),
                      days=_normalized(fields.get(DAYS, [])),
                      week_days=_normalized(fields.get(WEEK_DAYS, [])),
                      hours=_normalized(fields.get(HOURS, [])),
                      minutes=_normalized(fields.get(MINUTES, [])))


def parse_recurrence(expr: str) -> Recurrence:
    """Parse a recurrence from task settings JSON or five-field text.

    JSON: ``{"cron-hours": [9], "cron-minutes": [0], "cron-days": ["L"]}``; a
    missing key or an empty list leaves the field unrestricted.

    Text: ``minute hour day month day-of-week``, e.g. ``0 9 L * MON-FRI``. Day
    of week is ISO numbered (1 = Monday). Day-of-month and day-of-week
    restrictions must both hold.
    """
    expr = expr.strip()
    fields: Dict[FieldSpec, List[DayConstraint]] = {}

    if expr.startswith("{"):
        settings = json.loads(expr)
        if not isinstance(settings, dict):
            raise ValueError("recurrence settings must be a JSON object")
        for key, raw in settings.items():
            field = SETTING_KEYS.get(key)
            if field is None:
                raise ValueError(f"unknown recurrence setting '{key}'")
            fields.setdefault(field, []).extend(_parse_json_values(field, raw))
        return _build(fields)

    parts = expr.split()
    if len(parts) != len(TEXT_FIELDS):
        raise ValueError(f"expected {len(TEXT_FIELDS)} fields, got {len(parts)}")
    for field, text in zip(TEXT_FIELDS, parts):
        fields[field] = _parse_text_field(field, text)
    return _build(fields)
