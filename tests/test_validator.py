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

"""Tests for cron expression validation."""

import sys
from pathlib import Path

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from cronjobs.errors import ValidationError
from cronjobs.validator import (
    CRON_SHORTCUTS,
    is_every_expression,
    is_valid_cron,
    parse_every_duration,
)


class TestShortcuts:
    """Test named shortcut expressions."""

    @pytest.mark.parametrize("shortcut", sorted(CRON_SHORTCUTS))
    def test_every_shortcut_is_valid(self, shortcut):
        assert is_valid_cron(shortcut) is True

    def test_all_seven_shortcuts_present(self):
        assert CRON_SHORTCUTS == {
            "@annually", "@yearly", "@monthly", "@weekly",
            "@daily", "@hourly", "@reboot",
        }

    def test_unknown_shortcut_rejected(self):
        assert is_valid_cron("@fortnightly") is False
        assert is_valid_cron("@midnight") is False

    def test_shortcut_with_trailing_text_rejected(self):
        assert is_valid_cron("@daily please") is False


class TestEveryExpressions:
    """Test @every interval expressions."""

    @pytest.mark.parametrize("expr", [
        "@every 5m",
        "@every 1h30m",
        "@every 500ms",
        "@every 10s",
        "@every 250us",
        "@every 250µs",
        "@every 1000ns",
        "@every 1h2m3s",
    ])
    def test_valid_durations(self, expr):
        assert is_valid_cron(expr) is True
        assert is_every_expression(expr) is True

    @pytest.mark.parametrize("expr", [
        "@every",
        "@every ",
        "@every 5",
        "@every m",
        "@every 5d",
        "@every five minutes",
    ])
    def test_invalid_durations(self, expr):
        assert is_valid_cron(expr) is False

    def test_parse_duration_seconds(self):
        assert parse_every_duration("@every 1h30m") == 5400
        assert parse_every_duration("@every 45s") == 45
        assert parse_every_duration("@every 500ms") == pytest.approx(0.5)

    def test_parse_duration_zero_rejected(self):
        with pytest.raises(ValidationError):
            parse_every_duration("@every 0s")

    def test_parse_duration_not_every(self):
        with pytest.raises(ValidationError):
            parse_every_duration("0 9 * * *")


class TestFieldExpressions:
    """Test 5-7 field cron expressions."""

    @pytest.mark.parametrize("expr", [
        "* * * * *",
        "0 9 * * *",
        "0 9 * * 1-5",
        "0 10 * * 0,6",
        "*/15 * * * *",
        "0 */2 * * *",
        "0 0 1 1 *",
        "0 9 * * * 30",
        "0 0 12 1 1 0 2030",
    ])
    def test_valid_field_lists(self, expr):
        assert is_valid_cron(expr) is True

    def test_surrounding_whitespace_ignored(self):
        assert is_valid_cron("  0 9 * * *  ") is True

    def test_ranges_not_checked(self):
        # Only the shape is validated
        assert is_valid_cron("99 99 99 99 99") is True

    @pytest.mark.parametrize("expr", [
        "* * * *",
        "* * * * * * * *",
        "0 9 * * MON",
        "a b c d e",
        "0 9 ? * *",
    ])
    def test_invalid_field_lists(self, expr):
        assert is_valid_cron(expr) is False


class TestRejections:
    """Test values that are never valid."""

    def test_not_a_cron(self):
        assert is_valid_cron("not a cron") is False

    def test_empty_string(self):
        assert is_valid_cron("") is False
        assert is_valid_cron("   ") is False

    def test_non_string(self):
        assert is_valid_cron(None) is False
        assert is_valid_cron(12345) is False
