"""
Kernel settings - runtime configuration for behavior engines

Settings cover the ambient concerns only (logging, metrics, configuration
checks). Business rules live in each aggregate's rule tables.
"""

import os
from typing import Literal

from pydantic import BaseModel, Field

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class KernelSettings(BaseModel):
    """Runtime switches shared by all behavior engines"""

    log_level: LogLevel = Field(
        default="INFO",
        description="Level passed to configure_logging",
    )

    json_logs: bool = Field(
        default=False,
        description="Render logs as JSON (production) instead of console text",
    )

    metrics_enabled: bool = Field(
        default=True,
        description="Record Prometheus counters for handled commands and emitted events",
    )

    check_exhaustiveness: bool = Field(
        default=True,
        description="Verify at engine construction that every declared event has a fold rule",
    )

    model_config = {"frozen": True}

    @classmethod
    def from_env(cls) -> "KernelSettings":
        """
        Build settings from environment variables

        AGGREGATE_KERNEL_LOG_LEVEL: log level (default INFO)
        AGGREGATE_KERNEL_METRICS: "0"/"false" disables metrics
        ENVIRONMENT: "production" switches to JSON logs
        """
        metrics_flag = os.getenv("AGGREGATE_KERNEL_METRICS", "true").lower()
        return cls(
            log_level=os.getenv("AGGREGATE_KERNEL_LOG_LEVEL", "INFO").upper(),
            json_logs=os.getenv("ENVIRONMENT", "development").lower() == "production",
            metrics_enabled=metrics_flag not in ("0", "false", "no"),
        )


# Settings used by engines built without explicit settings
default_settings = KernelSettings.from_env()
