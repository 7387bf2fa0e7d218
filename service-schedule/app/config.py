"""Configuration for the schedule service."""

import os
from shared.framework.config import ServiceConfig


class ScheduleServiceConfig(ServiceConfig):
    """Configuration for the schedule read service."""

    def __init__(self) -> None:
        super().__init__(service_name="schedule")

        # Fail startup instead of serving 503s when the store is unreachable
        self.require_store_on_startup = os.getenv("SCHEDULE_REQUIRE_STORE_ON_STARTUP", "true").lower() == "true"
