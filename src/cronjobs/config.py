# cronbot - Discord Cron Scheduler Bot
# Copyright (c) 2025-2026 Slash Daemon slashdaemon@protonmail.com
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published by
# the Free Software Foundation, version 3 of the License.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE. See the
# GNU Affero General Public License for more details.
#
# You should have received a copy of the GNU Affero General Public License
# along with this program. If not, see <https://www.gnu.org/licenses/>.
#
# Commercial licensing: [slashdaemon@protonmail.com]

"""
Cron Bot Configuration

Runtime settings for the bot, loaded from environment variables.
"""

import logging
import os
from dataclasses import dataclass
from typing import Optional

import pytz

logger = logging.getLogger("cronbot.cronjobs.config")


def validate_timezone(tz_name: str) -> bool:
    """
    Validate that a timezone name is valid.

    Args:
        tz_name: IANA timezone name (e.g., "America/Los_Angeles")

    Returns:
        True if valid, False otherwise
    """
    try:
        pytz.timezone(tz_name)
        return True
    except pytz.UnknownTimeZoneError:
        return False


@dataclass
class CronBotConfig:
    """Configuration for the cron bot."""

    discord_token: Optional[str] = None
    database_url: Optional[str] = None

    # Timezone croniter evaluates cron fields in
    timezone: str = "UTC"

    # Lines per +listcron page
    page_size: int = 10

    # Characters of the job message shown in +listcron
    list_preview_length: int = 100

    command_prefix: str = "+"
    analytics_enabled: bool = True
    log_level: str = "INFO"

    def __post_init__(self):
        if not validate_timezone(self.timezone):
            logger.warning(f"Invalid timezone '{self.timezone}', falling back to UTC")
            self.timezone = "UTC"
        if self.page_size < 1:
            logger.warning(f"Invalid page size {self.page_size}, using 10")
            self.page_size = 10

    @classmethod
    def from_env(cls) -> "CronBotConfig":
        """Create config from environment variables with defaults."""
        return cls(
            discord_token=os.getenv("DISCORD_BOT_TOKEN"),
            database_url=os.getenv("DATABASE_URL"),
            timezone=os.getenv("CRON_TIMEZONE", "UTC"),
            page_size=int(os.getenv("CRON_PAGE_SIZE", "10")),
            list_preview_length=int(os.getenv("CRON_LIST_PREVIEW_LENGTH", "100")),
            command_prefix=os.getenv("CRON_COMMAND_PREFIX", "+"),
            analytics_enabled=os.getenv("ANALYTICS_ENABLED", "true").lower() == "true",
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )
