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
Cron Jobs Package

Persistent, cron-triggered channel messages.
"""

from .config import CronBotConfig, validate_timezone
from .errors import (
    CronBotError,
    InvalidCronError,
    PermissionDeniedError,
    ScopeError,
    StorageError,
    ValidationError,
)
from .scheduler import CronScheduler, CronTrigger, IntervalTrigger, RebootTrigger
from .store import CronJobStore, ScheduledJob
from .validator import CRON_SHORTCUTS, is_valid_cron, parse_every_duration

__all__ = [
    "CronBotConfig",
    "validate_timezone",
    "CronBotError",
    "InvalidCronError",
    "PermissionDeniedError",
    "ScopeError",
    "StorageError",
    "ValidationError",
    "CronScheduler",
    "CronTrigger",
    "IntervalTrigger",
    "RebootTrigger",
    "CronJobStore",
    "ScheduledJob",
    "CRON_SHORTCUTS",
    "is_valid_cron",
    "parse_every_duration",
]
