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
Cron Expression Validator

Shape-only checks for the expressions accepted by +addcron. Supports named
shortcuts ("@daily"), Go-style intervals ("@every 1h30m"), and 5 to 7 field
cron expressions ("0 9 * * 1-5").

Field ranges are deliberately not checked here: "99 * * * *" is accepted and
only rejected later if the trigger engine cannot use it.
"""

import logging
import re

from .errors import ValidationError

logger = logging.getLogger("cronbot.cronjobs.validator")

CRON_SHORTCUTS = frozenset(
    {
        "@annually",
        "@yearly",
        "@monthly",
        "@weekly",
        "@daily",
        "@hourly",
        "@reboot",
    }
)

# Seconds per @every unit, longest units first so "ms" wins over "m"
DURATION_UNITS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}

_DURATION_TOKEN = r"\d+(?:ns|us|µs|ms|s|m|h)"
_DURATION_TOKEN_RE = re.compile(r"(\d+)(ns|us|µs|ms|s|m|h)")
_EVERY_RE = re.compile(rf"@every\s+((?:{_DURATION_TOKEN})+)")

# *, N, N,N,..., N-M, N/S or */S
_FIELD = r"(?:(?:\*|\d+)/\d+|\d+-\d+|\d+(?:,\d+)+|\d+|\*)"
_FIELDS_RE = re.compile(rf"{_FIELD}(?:\s+{_FIELD}){{4,6}}")


def is_valid_cron(expression: str) -> bool:
    """
    Check whether an expression has an accepted cron shape.

    Args:
        expression: The expression to check

    Returns:
        True for a shortcut, an @every interval or 5-7 cron fields
    """
    if not isinstance(expression, str):
        return False

    expr = expression.strip()
    if not expr:
        return False

    if expr in CRON_SHORTCUTS:
        return True

    if _EVERY_RE.fullmatch(expr):
        return True

    return _FIELDS_RE.fullmatch(expr) is not None


def is_every_expression(expression: str) -> bool:
    """Check if expression is an @every interval."""
    return _EVERY_RE.fullmatch(expression.strip()) is not None


def parse_every_duration(expression: str) -> float:
    """
    Convert an @every expression into seconds.

    Args:
        expression: Expression like "@every 1h30m" or "@every 500ms"

    Returns:
        Interval length in seconds

    Raises:
        ValidationError: If the expression is not an @every interval or is zero
    """
    match = _EVERY_RE.fullmatch(expression.strip())
    if not match:
        raise ValidationError(f"Not an @every expression: '{expression}'")

    seconds = sum(
        int(amount) * DURATION_UNITS[unit]
        for amount, unit in _DURATION_TOKEN_RE.findall(match.group(1))
    )
    if seconds <= 0:
        raise ValidationError(f"Interval must be greater than zero: '{expression}'")

    logger.debug(f"Parsed interval {expression!r} as {seconds}s")
    return seconds
