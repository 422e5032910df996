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
Lightweight analytics tracking for cronbot.

Usage:
    from analytics import track, track_async

    # Synchronous (fire-and-forget, uses background task)
    track("command_used", "command", user_id=123, properties={"command_name": "addcron"})

    # Async (when you need to await completion)
    await track_async("cron_job_fired", "cron", channel_id=456, properties={"job_id": 7})

Events go to the analytics_events table through the bot's connection pool.
Until init() is called, tracking is a no-op.
"""

import asyncio
import json
import logging
import os
from typing import Any, Optional

import asyncpg

logger = logging.getLogger("cronbot.analytics")

_pool: Optional[asyncpg.Pool] = None
_enabled: bool = os.getenv("ANALYTICS_ENABLED", "true").lower() == "true"

ANALYTICS_SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS analytics_events (
    id BIGSERIAL PRIMARY KEY,
    event_name TEXT NOT NULL,
    event_category TEXT NOT NULL,
    user_id BIGINT,
    channel_id BIGINT,
    guild_id BIGINT,
    properties JSONB NOT NULL DEFAULT '{}',
    created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
);
"""


async def init(pool: asyncpg.Pool, enabled: bool = True) -> bool:
    """
    Attach analytics to a connection pool and create its table.

    Returns:
        True if analytics is active
    """
    global _pool, _enabled
    _enabled = enabled
    if not enabled:
        logger.info("Analytics disabled")
        return False

    try:
        await pool.execute(ANALYTICS_SCHEMA_SQL)
    except Exception as e:
        logger.warning(f"Analytics table setup failed, tracking disabled: {e}")
        return False

    _pool = pool
    return True


async def track_async(
    event_name: str,
    event_category: str,
    user_id: Optional[int] = None,
    channel_id: Optional[int] = None,
    guild_id: Optional[int] = None,
    properties: Optional[dict[str, Any]] = None,
) -> bool:
    """
    Track an event asynchronously.

    Args:
        event_name: Specific event identifier (e.g., "cron_job_created")
        event_category: One of: command, cron, error, system
        user_id: Discord user ID (optional)
        channel_id: Discord channel ID (optional)
        guild_id: Discord guild ID (optional)
        properties: Additional event data as key-value pairs

    Returns:
        True if event was recorded, False otherwise
    """
    if not _enabled or _pool is None:
        return False

    try:
        await _pool.execute(
            """
            INSERT INTO analytics_events
                (event_name, event_category, user_id, channel_id, guild_id, properties)
            VALUES ($1, $2, $3, $4, $5, $6)
            """,
            event_name,
            event_category,
            user_id,
            channel_id,
            guild_id,
            json.dumps(properties or {}),
        )
        return True
    except Exception as e:
        logger.debug(f"Analytics tracking failed: {e}")
        return False


def track(
    event_name: str,
    event_category: str,
    user_id: Optional[int] = None,
    channel_id: Optional[int] = None,
    guild_id: Optional[int] = None,
    properties: Optional[dict[str, Any]] = None,
) -> None:
    """
    Track an event (fire-and-forget).

    Creates a background task to record the event without blocking.
    Safe to call from sync or async contexts.
    """
    if not _enabled or _pool is None:
        return

    try:
        loop = asyncio.get_running_loop()
        loop.create_task(
            track_async(event_name, event_category, user_id, channel_id, guild_id, properties)
        )
    except RuntimeError:
        # No running loop - skip tracking
        pass


def shutdown() -> None:
    """Detach from the pool. The bot owns the pool and closes it."""
    global _pool
    _pool = None
