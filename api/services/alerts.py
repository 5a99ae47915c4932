# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Expiry alert service.
"""

import logging
from datetime import date
from typing import List, Optional, Sequence
from opentelemetry import trace

from .mongodb import MongoDBService
from domain.alerts import DEFAULT_THRESHOLDS, parse_thresholds, select_pending_alerts
from domain.records import CONTRACTS, MINUTES
from models.entities import PendingAlert

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

SETTINGS_COLLECTION = "notification_settings"


class AlertService:
    """Computes the contracts and minutes that reached an alert threshold."""

    def __init__(self, mongo_service: MongoDBService, default_thresholds: Sequence[int] = DEFAULT_THRESHOLDS):
        self.mongo_service = mongo_service
        self.default_thresholds = list(default_thresholds)

    def get_thresholds(self) -> List[int]:
        """Thresholds from the stored notification settings, else the configured default."""
        settings = self.mongo_service.find_one_by(SETTINGS_COLLECTION, {})
        if settings and settings.get("thresholds"):
            return parse_thresholds(settings["thresholds"], self.default_thresholds)
        return list(self.default_thresholds)

    def pending_alerts(self, force: bool = False, today: Optional[date] = None) -> List[PendingAlert]:
        """
        List records due for an expiry alert.

        Args:
            force: Include every record that has not expired yet
            today: Reference date

        Returns:
            Alerts sorted by ascending days remaining
        """
        with tracer.start_as_current_span("alerts.pending") as span:
            thresholds = self.get_thresholds()
            contracts = self.mongo_service.find(CONTRACTS.collection)
            minutes = self.mongo_service.find(MINUTES.collection)

            alerts = select_pending_alerts(contracts, minutes, thresholds, force, today)

            span.set_attributes({
                "alerts.force": force,
                "alerts.candidates": len(contracts) + len(minutes),
                "alerts.count": len(alerts)
            })
            logger.info(
                "Pending alerts computed",
                extra={"alerts_count": len(alerts), "thresholds": thresholds, "force": force}
            )
            return alerts
