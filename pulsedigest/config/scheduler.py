"""Scheduler configuration models."""

from __future__ import annotations

import re

from pydantic import AliasChoices, Field, model_validator

from pulsedigest.config.base import BaseConfig

_CLOCK_TIME = re.compile(r"^(?P<hour>\d{1,2}):(?P<minute>\d{2})$")


class SchedulerJobConfig(BaseConfig):
    """Configuration for a single scheduled job.

    Either ``cron`` or the daily ``time`` shorthand (``"HH:MM"``) must be set;
    ``time`` is translated into the equivalent cron expression.
    """

    enabled: bool = Field(True, description="Whether the job is active")
    name: str = Field(..., description="Human-friendly name for the job")
    cron: str | None = Field(
        None,
        description="Cron expression (minute hour day month weekday)",
        validation_alias=AliasChoices("cron", "cron_schedule"),
        serialization_alias="cron",
    )
    time: str | None = Field(None, description="Daily run time as HH:MM, alternative to cron")

    @model_validator(mode="after")
    def _resolve_schedule(self) -> "SchedulerJobConfig":
        if self.cron:
            return self
        if self.time is None:
            raise ValueError("Either 'cron' or 'time' must be provided for a scheduled job")

        match = _CLOCK_TIME.match(self.time.strip())
        if match is None:
            raise ValueError(f"Invalid time '{self.time}', expected HH:MM")
        hour, minute = int(match.group("hour")), int(match.group("minute"))
        if hour > 23 or minute > 59:
            raise ValueError(f"Invalid time '{self.time}', expected HH:MM")
        self.cron = f"{minute} {hour} * * *"
        return self


class SchedulerConfig(BaseConfig):
    """Scheduler-wide configuration."""

    enabled: bool = Field(True, description="Whether the scheduler is active")
    timezone: str = Field("UTC", description="Timezone used by the scheduler")
    generation_job: SchedulerJobConfig | None = Field(
        None, description="Periodic remote digest generation job"
    )


__all__ = ["SchedulerJobConfig", "SchedulerConfig"]
