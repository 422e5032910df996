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
Cron Job Errors

Exception taxonomy for the cron job system. Everything the command router
catches and turns into a chat reply derives from CronBotError.
"""


class CronBotError(Exception):
    """Base class for cron bot errors."""

    pass


class ValidationError(CronBotError):
    """Raised when command arguments or a cron expression are malformed."""

    pass


class InvalidCronError(ValidationError):
    """Raised when an expression passes the shape check but cannot drive a trigger."""

    def __init__(self, expression: str, reason: str = ""):
        self.expression = expression
        self.reason = reason
        message = f"Invalid cron expression: '{expression}'"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class PermissionDeniedError(CronBotError):
    """Raised when the acting member lacks the Manage Server permission."""

    pass


class StorageError(CronBotError):
    """Raised when the job store cannot read or write."""

    pass


class ScopeError(CronBotError):
    """Raised when a command is used outside a server (e.g. in DMs)."""

    pass
