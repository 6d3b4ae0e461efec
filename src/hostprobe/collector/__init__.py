"""Periodic OS metric collectors."""

from .base import MetricRecord, Snapshot
from .manager import CollectorManager
from .periodic import PeriodicCollector

__all__ = ["CollectorManager", "MetricRecord", "PeriodicCollector", "Snapshot"]
