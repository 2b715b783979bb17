# SPDX-FileCopyrightText: 2025 Eric Löffler <eric.loeffler@opalia.systems>
# SPDX-License-Identifier: GPL-3.0-or-later

import json
import re
import secrets
import subprocess
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional
from zoneinfo import ZoneInfo

NO_JITTER_SPECS = ("", "0", "null")


def parse_dt_with_tz(td_str: str, tz_name: Optional[str]) -> datetime:
    # datetime.fromisoformat does not accept 'Z', so mapping to '+00:00' is needed
    dt = datetime.fromisoformat(re.sub(r'Z$', '+00:00', td_str.strip()))

    if tz_name and tz_name != "null":
        target_tz = ZoneInfo(tz_name)

        # if no offset is present, use target_tz
        if dt.tzinfo is None:
            return dt.replace(tzinfo=target_tz)

        # convert to desired time zone, the recurrence is evaluated on its wall clock
        return dt.astimezone(target_tz)

    # if no offset is present, interpret as UTC
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)

    return dt


def duration2seconds(spec: str) -> int:
    completed = subprocess.run(
        ["duration2seconds", spec],
        check=True,
        stdout=subprocess.PIPE,
        stderr=None,
        text=True,
    )
    seconds = int(completed.stdout.strip())
    if seconds < 0:
        raise ValueError(f"negative duration '{spec}'")
    return seconds


@dataclass(frozen=True)
class Jitter:
    max_s: int
    offset_s: int

    @property
    def is_active(self) -> bool:
        return self.max_s > 0


def compute_jitter(jitter_spec: str) -> Jitter:
    # plain zero needs no round trip through the duration helper
    if jitter_spec.strip() in NO_JITTER_SPECS:
        return Jitter(max_s=0, offset_s=0)

    total = duration2seconds(jitter_spec)
    offset = secrets.randbelow(total + 1) if total > 0 else 0
    return Jitter(max_s=total, offset_s=offset)


def to_epoch_s(dt: datetime) -> int:
    return int(dt.astimezone(timezone.utc).timestamp())


def finalize_result(base_local: datetime, next_local: Optional[datetime], jitter: Jitter) -> str:
    base_epoch_s = to_epoch_s(base_local)
    next_epoch_s = None

    # no next occurrence: the recurrence can never be satisfied again
    if next_local is not None:
        next_epoch_s = to_epoch_s(next_local)
        if jitter.is_active:
            next_epoch_s += jitter.offset_s

    result = {
        "base_epoch_s": base_epoch_s,
        "next_epoch_s": next_epoch_s,
        "jitter_s": jitter.max_s,
        "jitter_offset_s": jitter.offset_s,
        "delta_s": (base_epoch_s - next_epoch_s) if (next_epoch_s is not None) else None
    }

    return json.dumps(result, ensure_ascii=False, separators=(",", ":"))
