# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Lifecycle status resolution for contracts and minutes.

This module contains pure functions that turn the raw date fields of a
stored record into the values shown by the console: a display date, a
signed day count relative to today and a lifecycle status. Nothing here
performs I/O or raises; malformed dates degrade to a day count of 0 and
to an absent storage value.
"""

import calendar
import re
from datetime import date, datetime, timedelta
from typing import Optional, Union

from models.enums import LifecycleStatus, ManualStatus

# Records ending within this many days are flagged as "warning".
WARNING_THRESHOLD_DAYS = 30

_LEADING_INT = re.compile(r"\s*[+-]?\d+")


def _leading_int(text: str) -> Optional[int]:
    match = _LEADING_INT.match(text)
    return int(match.group(0)) if match else None


def _rolled_date(year: int, month: int, day: int) -> date:
    """Build a date letting month and day overflow into the following units (31/02 is 03/03)."""
    month_index = month - 1
    first = date(year + month_index // 12, month_index % 12 + 1, 1)
    return first + timedelta(days=day - 1)


def _split_date(date_str: str) -> Optional[date]:
    if '/' in date_str:
        parts = date_str.split('/')
        if len(parts) != 3:
            return None
        day, month, year = parts
    elif '-' in date_str:
        parts = date_str.split('-')
        if len(parts) != 3:
            return None
        year, month, day = parts
    else:
        return None

    numbers = [_leading_int(part) for part in (year, month, day)]
    if None in numbers:
        return None
    try:
        return _rolled_date(*numbers)
    except (ValueError, OverflowError):
        return None


def parse_date(date_str: Optional[str]) -> Optional[date]:
    """Parse a DD/MM/YYYY or YYYY-MM-DD string, returning None when malformed."""
    if not date_str or not isinstance(date_str, str):
        return None
    return _split_date(date_str.strip())


def parse_to_day_count(date_str: Optional[str], today: Optional[date] = None) -> int:
    """
    Signed number of days from today to the given date.

    Accepts DD/MM/YYYY and YYYY-MM-DD strings. Day and month values out
    of range roll over (31/02 counts as 03/03). Empty or non-numeric
    input returns 0, which is indistinguishable from "due today".

    Args:
        date_str: Date string in either supported format
        today: Reference date, defaults to the local current date

    Returns:
        Positive for future dates, negative for past dates
    """
    target = parse_date(date_str)
    if target is None:
        return 0

    reference = today or date.today()
    if isinstance(reference, datetime):
        reference = reference.date()

    return (target - reference).days


def resolve_status(days_remaining: int,
                   manual_status: Union[ManualStatus, str, None] = None) -> LifecycleStatus:
    """Resolve the lifecycle status; a manual executed/rescinded override always wins."""
    override = ManualStatus.parse(manual_status)
    if override is ManualStatus.EXECUTED:
        return LifecycleStatus.EXECUTED
    if override is ManualStatus.RESCINDED:
        return LifecycleStatus.RESCINDED

    if days_remaining < 0:
        return LifecycleStatus.EXPIRED
    if days_remaining <= WARNING_THRESHOLD_DAYS:
        return LifecycleStatus.WARNING
    return LifecycleStatus.ACTIVE


def to_display(storage_date: Optional[str]) -> str:
    """Convert YYYY-MM-DD to DD/MM/YYYY. Values without three parts pass through."""
    if not storage_date:
        return ''
    parts = str(storage_date).split('-')
    if len(parts) != 3:
        return str(storage_date)
    return '/'.join(parts[i] for i in (2, 1, 0))


def to_storage(display_date: Optional[str]) -> Optional[str]:
    """Convert DD/MM/YYYY to YYYY-MM-DD; None means the field must not be written."""
    if not display_date:
        return None
    parts = str(display_date).split('/')
    if len(parts) != 3:
        return None
    return '-'.join(parts[i] for i in (2, 1, 0))


def add_duration(base_date: Optional[str], duration: Optional[int], unit: Optional[str]) -> Optional[str]:
    """
    Add a number of days, months or years to a DD/MM/YYYY date.

    Month and year additions clamp to the last day of the resulting month
    (31/01 + 1 month gives 28/02 or 29/02). An empty date, a zero duration,
    an unknown unit or a malformed date returns the input unchanged.

    Args:
        base_date: Date in DD/MM/YYYY format
        duration: Amount to add (may be negative)
        unit: 'dia'/'days', 'mes'/'months' or 'ano'/'years'

    Returns:
        The new date in DD/MM/YYYY format
    """
    if not base_date or not duration:
        return base_date

    parts = base_date.split('/')
    if len(parts) != 3:
        return base_date
    start = parse_date(base_date)
    if start is None:
        return base_date

    try:
        if unit in ('dia', 'days'):
            result = date.fromordinal(start.toordinal() + duration)
        elif unit in ('mes', 'months'):
            month_index = start.month - 1 + duration
            year = start.year + month_index // 12
            month = month_index % 12 + 1
            result = _clamped_date(year, month, start.day)
        elif unit in ('ano', 'years'):
            result = _clamped_date(start.year + duration, start.month, start.day)
        else:
            return base_date
    except (ValueError, OverflowError):
        return base_date

    return result.strftime('%d/%m/%Y')


def _clamped_date(year: int, month: int, day: int) -> date:
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day, last_day))
