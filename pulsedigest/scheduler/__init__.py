"""Scheduler for periodic digest generation."""

from __future__ import annotations

from .service import GENERATION_JOB_ID, SchedulerService

__all__ = ["GENERATION_JOB_ID", "SchedulerService"]
