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

"""Tests for bot configuration and analytics wiring."""

import sys
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import analytics
from cronjobs.config import CronBotConfig, validate_timezone


class TestCronBotConfig:
    """Test environment-driven configuration."""

    def test_default_config(self):
        config = CronBotConfig()
        assert config.timezone == "UTC"
        assert config.page_size == 10
        assert config.list_preview_length == 100
        assert config.command_prefix == "+"

    def test_config_from_env_default(self):
        with patch.dict("os.environ", {}, clear=True):
            config = CronBotConfig.from_env()
            assert config.discord_token is None
            assert config.database_url is None
            assert config.timezone == "UTC"
            assert config.page_size == 10
            assert config.analytics_enabled is True
            assert config.log_level == "INFO"

    def test_config_from_env_custom_values(self):
        with patch.dict("os.environ", {
            "DISCORD_BOT_TOKEN": "token",
            "DATABASE_URL": "postgresql://localhost/cronbot",
            "CRON_TIMEZONE": "Europe/London",
            "CRON_PAGE_SIZE": "5",
            "ANALYTICS_ENABLED": "false",
            "LOG_LEVEL": "debug",
        }):
            config = CronBotConfig.from_env()
            assert config.discord_token == "token"
            assert config.database_url == "postgresql://localhost/cronbot"
            assert config.timezone == "Europe/London"
            assert config.page_size == 5
            assert config.analytics_enabled is False
            assert config.log_level == "DEBUG"

    def test_invalid_timezone_falls_back_to_utc(self):
        config = CronBotConfig(timezone="Mars/Olympus_Mons")
        assert config.timezone == "UTC"

    def test_invalid_page_size_reset(self):
        assert CronBotConfig(page_size=0).page_size == 10

    def test_validate_timezone(self):
        assert validate_timezone("America/Los_Angeles") is True
        assert validate_timezone("Not/AZone") is False


@pytest.fixture
def analytics_state(monkeypatch):
    """Isolate module-level analytics state."""
    monkeypatch.setattr(analytics, "_pool", None)
    monkeypatch.setattr(analytics, "_enabled", True)
    yield


class TestAnalytics:
    """Test analytics attach/track behavior."""

    @pytest.mark.asyncio
    async def test_track_noop_before_init(self, analytics_state):
        assert await analytics.track_async("command_used", "command") is False

    @pytest.mark.asyncio
    async def test_init_creates_table_and_tracks(self, analytics_state):
        pool = MagicMock()
        pool.execute = AsyncMock()

        assert await analytics.init(pool) is True
        assert "analytics_events" in pool.execute.await_args_list[0].args[0]

        assert await analytics.track_async(
            "cron_job_created", "cron", user_id=1, properties={"job_id": 3}
        ) is True
        args = pool.execute.await_args.args
        assert args[1] == "cron_job_created"
        assert args[6] == '{"job_id": 3}'

    @pytest.mark.asyncio
    async def test_init_disabled(self, analytics_state):
        pool = MagicMock()
        pool.execute = AsyncMock()

        assert await analytics.init(pool, enabled=False) is False
        pool.execute.assert_not_awaited()
        assert await analytics.track_async("x", "system") is False

    @pytest.mark.asyncio
    async def test_track_failure_returns_false(self, analytics_state):
        pool = MagicMock()
        pool.execute = AsyncMock()
        await analytics.init(pool)
        pool.execute = AsyncMock(side_effect=OSError("db down"))

        assert await analytics.track_async("x", "system") is False

    def test_shutdown_detaches(self, analytics_state):
        analytics._pool = MagicMock()
        analytics.shutdown()
        assert analytics._pool is None
