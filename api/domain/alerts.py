# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Expiry alert selection for contracts and minutes.

Pure functions over stored rows: no I/O, the caller provides rows, the
threshold list and the reference date.
"""

from datetime import date
from typing import Any, Dict, Iterable, List, Optional, Sequence

from models.entities import PendingAlert
from models.enums import ManualStatus
from domain.lifecycle import parse_to_day_count
from domain.records import fallback_identifier

DEFAULT_THRESHOLDS = (180, 150, 120, 90, 60, 30, 7)

KIND_CONTRACT = 'CONTRATO'
KIND_MINUTE = 'ATA'


def parse_thresholds(value: Any, default: Sequence[int] = DEFAULT_THRESHOLDS) -> List[int]:
    """Read thresholds from a list or a comma separated string."""
    if value is None or value == '':
        return list(default)
    if isinstance(value, str):
        items = [item.strip() for item in value.split(',') if item.strip()]
    else:
        items = list(value)
    try:
        return [int(item) for item in items]
    except (TypeError, ValueError):
        return list(default)


def _pending_alert(row: Dict[str, Any], kind: str, identifier_field: str,
                   thresholds: Sequence[int], force: bool, today: Optional[date]) -> Optional[PendingAlert]:
    if ManualStatus.parse(row.get('manual_status')) is not ManualStatus.AUTOMATIC:
        return None

    days = parse_to_day_count(row.get('end_date'), today)
    if days not in thresholds and not (force and days >= 0):
        return None

    return PendingAlert(
        identifier=row.get(identifier_field) or fallback_identifier(row),
        kind=kind,
        object=row.get('object') or '',
        department=row.get('department') or '',
        days_remaining=days,
        alert_reason=f"Alerta de {days} dias"
    )


def select_pending_alerts(contracts: Iterable[Dict[str, Any]],
                          minutes: Iterable[Dict[str, Any]],
                          thresholds: Sequence[int] = DEFAULT_THRESHOLDS,
                          force: bool = False,
                          today: Optional[date] = None) -> List[PendingAlert]:
    """
    Select contracts and minutes whose day count hits an alert threshold.

    Executed and rescinded records are skipped. With ``force`` every record
    that has not expired yet is returned, whatever its day count.

    Args:
        contracts: Stored contract rows (YYYY-MM-DD end dates)
        minutes: Stored minute rows
        thresholds: Day counts that trigger an alert
        force: Select every non-expired record
        today: Reference date

    Returns:
        Alerts sorted by ascending days remaining
    """
    alerts = []
    for row in contracts:
        alert = _pending_alert(row, KIND_CONTRACT, 'contract_id', thresholds, force, today)
        if alert:
            alerts.append(alert)
    for row in minutes:
        alert = _pending_alert(row, KIND_MINUTE, 'minute_id', thresholds, force, today)
        if alert:
            alerts.append(alert)

    return sorted(alerts, key=lambda alert: alert.days_remaining)
