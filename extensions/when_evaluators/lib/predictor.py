# SPDX-FileCopyrightText: 2025 Eric Löffler <eric.loeffler@opalia.systems>
# SPDX-License-Identifier: GPL-3.0-or-later

"""Next-occurrence prediction for five-field calendar recurrences.

The search runs coarsest field first (year, month, day, hour, minute). Each field
is positioned from the reference instant only while the candidate built so far
is not yet later than the reference; a rotor that has to wrap carries into the
next coarser field. The day rotor is rebound every time year or month changes.
"""

from datetime import MAXYEAR, datetime
from typing import Iterable, Iterator, Optional

from lib_helpers.rotor import DayConstraint, DayRotor, Rotor, YearRotor

# the Gregorian calendar (weekdays included) repeats every 400 years
SEARCH_HORIZON_YEARS = 400


class _SearchExhausted(Exception):
    pass


class Predictor:

    def __init__(self,
                 months: Iterable[int] = (),
                 days: Iterable[DayConstraint] = (),
                 week_days: Iterable[int] = (),
                 hours: Iterable[int] = (),
                 minutes: Iterable[int] = ()):
        self.year = YearRotor()
        self.month = Rotor(months, 1, 12)
        self.day = DayRotor(days, week_days)
        self.hour = Rotor(hours, 0, 23)
        self.minute = Rotor(minutes, 0, 59)
        self._year_limit = MAXYEAR

    def predict(self, current: datetime) -> Optional[datetime]:
        """Return the first matching minute strictly after ``current``.

        The result carries the tzinfo of ``current``. ``None`` means that no
        instant satisfies the recurrence.
        """
        self._year_limit = min(current.year + SEARCH_HORIZON_YEARS, MAXYEAR)

        try:
            return self._search(current)
        except _SearchExhausted:
            return None

    def occurrences(self, current: datetime, count: int) -> Iterator[datetime]:
        for _ in range(count):
            following = self.predict(current)
            if following is None:
                return
            yield following
            current = following

    def _search(self, current: datetime) -> datetime:
        self.month.reset()
        self.hour.reset()
        self.minute.reset()

        self.year.set(current.year)
        if self.month.set(current.month):
            self.year.increment()
        self._bind_days()

        candidate = self._compose(current)
        if candidate > current:
            return candidate

        if self.day.set(current.day):
            self._advance_month()
        candidate = self._compose(current)
        if candidate > current:
            return candidate

        if self.hour.set(current.hour):
            self._advance_day()
        candidate = self._compose(current)
        if candidate > current:
            return candidate

        if self.minute.set(current.minute):
            self._advance_hour()
        candidate = self._compose(current)
        if candidate > current:
            return candidate

        # every field matches the reference (seconds aside), so move one tick on
        if self.minute.increment():
            self._advance_hour()
        return self._compose(current)

    def _bind_days(self) -> None:
        # skip months in which no day satisfies both day constraints
        while True:
            if self.year.value > self._year_limit:
                raise _SearchExhausted()
            self.day.bind(self.year.value, self.month.value)
            if not self.day.reset():
                return
            if self.month.increment():
                self.year.increment()

    def _advance_month(self) -> None:
        if self.month.increment():
            self.year.increment()
        self._bind_days()

    def _advance_day(self) -> None:
        if self.day.increment():
            self._advance_month()

    def _advance_hour(self) -> None:
        if self.hour.increment():
            self._advance_day()

    def _compose(self, current: datetime) -> datetime:
        return current.replace(year=self.year.value,
                               month=self.month.value,
                               day=self.day.value,
                               hour=self.hour.value,
                               minute=self.minute.value,
                               second=0,
                               microsecond=0,
                               fold=0)

    def __repr__(self) -> str:
        return (f"Predictor(months={self.month.values}, days={sorted(self.day.month_days, key=str)}, "
                f"week_days={sorted(self.day.week_days)}, hours={self.hour.values}, "
                f"minutes={self.minute.values})")
