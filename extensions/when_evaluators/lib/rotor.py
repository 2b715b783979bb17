# SPDX-FileCopyrightText: 2025 Eric Löffler <eric.loeffler@opalia.systems>
# SPDX-License-Identifier: GPL-3.0-or-later

import enum
from datetime import date, timedelta
from typing import Iterable, List, Tuple, Union


class DayMarker(enum.Enum):
    LAST_DAY_OF_MONTH = 32


LAST_DAY_OF_MONTH = DayMarker.LAST_DAY_OF_MONTH

DayConstraint = Union[int, DayMarker]


class Rotor:
    """Cyclic selector over the sorted allowed values of one calendar field.

    An empty ``allowed`` is a wildcard and expands to ``low..high``. ``set`` and
    ``increment`` return ``True`` when the rotor wrapped around to its smallest
    value, which the caller treats as a carry into the next coarser field.
    """

    def __init__(self, allowed: Iterable[int], low: int, high: int):
        values = sorted(set(allowed))
        self._values: List[int] = values if values else list(range(low, high + 1))
        self._pos = 0

    @property
    def values(self) -> Tuple[int, ...]:
        return tuple(self._values)

    @property
    def value(self) -> int:
        return self._values[self._pos]

    def reset(self) -> None:
        self._pos = 0

    def set(self, target: int) -> bool:
        for pos, candidate in enumerate(self._values):
            if candidate >= target:
                self._pos = pos
                return False
        self._pos = 0
        return True

    def increment(self) -> bool:
        if self._pos + 1 < len(self._values):
            self._pos += 1
            return False
        self._pos = 0
        return True

    def __repr__(self) -> str:
        return f"{type(self).__name__}(value={self.value}, values={self._values})"


class YearRotor:
    # years are unbounded going forward, so there is never a carry

    def __init__(self, value: int = 1):
        self.value = value

    def set(self, target: int) -> bool:
        self.value = target
        return False

    def increment(self) -> bool:
        self.value += 1
        return False

    def __repr__(self) -> str:
        return f"YearRotor(value={self.value})"


class DayRotor(Rotor):
    """Rotor over the days of one (year, month) that satisfy both day constraints.

    ``month_days`` and ``week_days`` are combined with AND. A month for which no
    day qualifies leaves the rotor empty; every move then reports a carry.
    """

    def __init__(self, month_days: Iterable[DayConstraint] = (), week_days: Iterable[int] = ()):
        # the plain value 32 is accepted as an alias of the last-day marker
        self.month_days = frozenset(
            LAST_DAY_OF_MONTH if day == LAST_DAY_OF_MONTH.value else day for day in month_days
        )
        self.week_days = frozenset(week_days)
        self.bound_year = 0
        self.bound_month = 0
        self._values = []
        self._pos = 0

    @property
    def is_empty(self) -> bool:
        return not self._values

    @property
    def value(self) -> int:
        if not self._values:
            raise LookupError(f"no qualifying day in {self.bound_year:04d}-{self.bound_month:02d}")
        return self._values[self._pos]

    def bind(self, year: int, month: int) -> None:
        self.bound_year = year
        self.bound_month = month
        self._values = self._qualifying_days(year, month)
        self._pos = 0

    def _qualifying_days(self, year: int, month: int) -> List[int]:
        want_last = LAST_DAY_OF_MONTH in self.month_days
        days = []

        day = date(year, month, 1)
        while day.month == month:
            following = day + timedelta(days=1) if day < date.max else None
            in_month = not self.month_days or day.day in self.month_days
            in_week = not self.week_days or day.isoweekday() in self.week_days

            if in_week and in_month:
                days.append(day.day)
            elif in_week and want_last and (following is None or following.month != month):
                days.append(day.day)

            if following is None:
                break
            day = following

        return days

    def reset(self) -> bool:
        self._pos = 0
        return self.is_empty

    def set(self, target: int) -> bool:
        if self.is_empty:
            return True
        return super().set(target)

    def increment(self) -> bool:
        if self.is_empty:
            return True
        return super().increment()

    def __repr__(self) -> str:
        return (f"DayRotor(bound={self.bound_year:04d}-{self.bound_month:02d}, "
                f"values={self._values})")
