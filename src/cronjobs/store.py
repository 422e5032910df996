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
Cron Job Store Module

Handles database operations for scheduled cron jobs.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

import asyncpg

from .errors import StorageError

logger = logging.getLogger("cronbot.cronjobs.store")

# Errors asyncpg raises for failed queries and dropped connections
DB_ERRORS = (asyncpg.PostgresError, asyncpg.InterfaceError, OSError)

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS cron_jobs (
    id BIGSERIAL PRIMARY KEY,
    cron_time TEXT NOT NULL,
    message TEXT NOT NULL,
    channel_id BIGINT NOT NULL,
    guild_id BIGINT,
    created_by BIGINT,
    created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
);
CREATE INDEX IF NOT EXISTS idx_cron_jobs_guild ON cron_jobs (guild_id);
"""


@dataclass(frozen=True)
class ScheduledJob:
    """A persisted cron job: what to send, where, and when."""

    cron_expression: str
    message: str
    channel_id: int
    guild_id: Optional[int] = None
    created_by: Optional[int] = None
    id: Optional[int] = None
    created_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, row) -> "ScheduledJob":
        return cls(
            id=row["id"],
            cron_expression=row["cron_time"],
            message=row["message"],
            channel_id=row["channel_id"],
            guild_id=row["guild_id"],
            created_by=row["created_by"],
            created_at=row["created_at"],
        )

    def preview(self, max_length: int = 100) -> str:
        """Single line summary used by +listcron."""
        return f"{self.id}: {self.cron_expression} - {self.message[:max_length]}"


class CronJobStore:
    """
    Manages database operations for cron jobs.

    Jobs are immutable once created: they can be inserted, listed and deleted,
    never updated.
    """

    def __init__(self, db_pool: asyncpg.Pool):
        """
        Initialize the job store.

        Args:
            db_pool: asyncpg connection pool
        """
        self.db = db_pool

    async def ensure_schema(self) -> None:
        """Create the cron_jobs table if it doesn't exist."""
        try:
            await self.db.execute(SCHEMA_SQL)
        except DB_ERRORS as e:
            raise StorageError(f"Failed to create cron_jobs schema: {e}") from e
        logger.info("cron_jobs schema ready")

    async def insert(self, job: ScheduledJob) -> int:
        """
        Persist a new cron job.

        Args:
            job: The job to store (its id is ignored)

        Returns:
            The ID of the created job

        Raises:
            StorageError: On constraint violations or connection failures
        """
        try:
            row = await self.db.fetchrow(
                """
                INSERT INTO cron_jobs (cron_time, message, channel_id, guild_id, created_by)
                VALUES ($1, $2, $3, $4, $5)
                RETURNING id
                """,
                job.cron_expression,
                job.message,
                job.channel_id,
                job.guild_id,
                job.created_by,
            )
        except DB_ERRORS as e:
            raise StorageError(f"Failed to insert cron job: {e}") from e

        job_id = row["id"]
        logger.info(
            f"Created cron job {job_id} in guild {job.guild_id}: "
            f"cron='{job.cron_expression}', channel={job.channel_id}"
        )
        return job_id

    async def list_all(self, guild_id: Optional[int] = None) -> list[ScheduledJob]:
        """
        List cron jobs in insertion order.

        Args:
            guild_id: Only return jobs for this guild (None = every job)

        Returns:
            List of ScheduledJob
        """
        try:
            if guild_id is None:
                rows = await self.db.fetch(
                    """
                    SELECT id, cron_time, message, channel_id, guild_id,
                           created_by, created_at
                    FROM cron_jobs
                    ORDER BY id ASC
                    """
                )
            else:
                rows = await self.db.fetch(
                    """
                    SELECT id, cron_time, message, channel_id, guild_id,
                           created_by, created_at
                    FROM cron_jobs
                    WHERE guild_id = $1
                    ORDER BY id ASC
                    """,
                    guild_id,
                )
        except DB_ERRORS as e:
            raise StorageError(f"Failed to list cron jobs: {e}") from e

        return [ScheduledJob.from_row(row) for row in rows]

    async def get(self, job_id: int) -> Optional[ScheduledJob]:
        """
        Get a cron job by ID.

        Args:
            job_id: Job ID

        Returns:
            ScheduledJob or None if not found
        """
        try:
            row = await self.db.fetchrow(
                """
                SELECT id, cron_time, message, channel_id, guild_id,
                       created_by, created_at
                FROM cron_jobs
                WHERE id = $1
                """,
                job_id,
            )
        except DB_ERRORS as e:
            raise StorageError(f"Failed to fetch cron job {job_id}: {e}") from e

        return ScheduledJob.from_row(row) if row else None

    async def delete_by_id(self, job_id: int, guild_id: Optional[int] = None) -> bool:
        """
        Delete a cron job.

        Deleting a missing ID is not an error.

        Args:
            job_id: Job ID
            guild_id: Only delete if the job belongs to this guild (None = any)

        Returns:
            True if a row was deleted
        """
        try:
            if guild_id is None:
                result = await self.db.execute(
                    "DELETE FROM cron_jobs WHERE id = $1",
                    job_id,
                )
            else:
                result = await self.db.execute(
                    "DELETE FROM cron_jobs WHERE id = $1 AND guild_id = $2",
                    job_id,
                    guild_id,
                )
        except DB_ERRORS as e:
            raise StorageError(f"Failed to delete cron job {job_id}: {e}") from e

        deleted = result == "DELETE 1"
        if deleted:
            logger.info(f"Deleted cron job {job_id}")
        else:
            logger.debug(f"Delete of cron job {job_id} matched no rows")
        return deleted
