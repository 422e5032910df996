#!/usr/bin/env python3
"""
Cron Inspector CLI

Operator tool for inspecting persisted cron jobs without the bot running.

Usage:
    # List all cron jobs
    python scripts/cron_inspector.py list

    # List jobs for one guild
    python scripts/cron_inspector.py list --guild-id 123456789

    # Inspect a specific job
    python scripts/cron_inspector.py inspect --job-id 42

    # Delete a job (takes effect in the bot after its next restart)
    python scripts/cron_inspector.py delete --job-id 42

    # Export jobs to JSON (for backup before migration)
    python scripts/cron_inspector.py export --output backups/cron_jobs.json
"""

import argparse
import asyncio
import json
import logging
import os
import sys
from datetime import datetime
from pathlib import Path

import asyncpg
from dotenv import load_dotenv

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from cronjobs import CronJobStore, ScheduledJob, StorageError, is_valid_cron

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(message)s",
)
logger = logging.getLogger(__name__)


def format_datetime(dt: datetime) -> str:
    """Format datetime for display."""
    if dt is None:
        return "Never"
    return dt.strftime("%Y-%m-%d %H:%M:%S")


def truncate(text: str, max_len: int = 80) -> str:
    """Truncate text with ellipsis."""
    if len(text) <= max_len:
        return text
    return text[: max_len - 3] + "..."


def job_to_dict(job: ScheduledJob) -> dict:
    return {
        "id": job.id,
        "cron_time": job.cron_expression,
        "message": job.message,
        "channel_id": job.channel_id,
        "guild_id": job.guild_id,
        "created_by": job.created_by,
        "created_at": job.created_at.isoformat() if job.created_at else None,
    }


async def list_jobs(store: CronJobStore, guild_id: int = None, verbose: bool = False):
    """List cron jobs, optionally for one guild."""
    jobs = await store.list_all(guild_id=guild_id)

    if not jobs:
        logger.info("No cron jobs found.")
        return

    logger.info(f"\n{'='*80}")
    logger.info(f"Found {len(jobs)} cron job(s)")
    logger.info(f"{'='*80}\n")

    for job in jobs:
        flag = "" if is_valid_cron(job.cron_expression) else "  [INVALID EXPRESSION]"
        logger.info(f"[{job.id}] {job.cron_expression}{flag}")
        logger.info(f"    Guild: {job.guild_id} | Channel: {job.channel_id}")
        logger.info(f"    Message: {truncate(job.message, 70)}")
        if verbose:
            logger.info(f"    Created by: {job.created_by}")
            logger.info(f"    Created at: {format_datetime(job.created_at)}")
        logger.info("")


async def inspect_job(store: CronJobStore, job_id: int):
    """Show every field of one job."""
    job = await store.get(job_id)
    if job is None:
        logger.info(f"Cron job {job_id} not found.")
        return

    for key, value in job_to_dict(job).items():
        logger.info(f"{key:>12}: {value}")
    logger.info(f"{'valid':>12}: {is_valid_cron(job.cron_expression)}")


async def delete_job(store: CronJobStore, job_id: int):
    """Delete a job by ID."""
    if await store.delete_by_id(job_id):
        logger.info(f"Deleted cron job {job_id}. Restart the bot to stop its trigger.")
    else:
        logger.info(f"Cron job {job_id} not found.")


async def export_jobs(store: CronJobStore, output: str, guild_id: int = None):
    """Export jobs to a JSON file."""
    jobs = await store.list_all(guild_id=guild_id)
    payload = {
        "exported_at": datetime.now().isoformat(),
        "count": len(jobs),
        "jobs": [job_to_dict(job) for job in jobs],
    }

    output_path = Path(output)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
    logger.info(f"Exported {len(jobs)} cron job(s) to {output_path}")


async def main_async(args):
    """Main async entry point."""
    db_url = os.environ.get("DATABASE_URL")
    if not db_url:
        logger.error("DATABASE_URL environment variable required")
        sys.exit(1)

    conn = await asyncpg.connect(db_url)
    store = CronJobStore(conn)
    try:
        if args.command == "list":
            await list_jobs(store, guild_id=args.guild_id, verbose=args.verbose)
        elif args.command == "inspect":
            await inspect_job(store, args.job_id)
        elif args.command == "delete":
            await delete_job(store, args.job_id)
        elif args.command == "export":
            await export_jobs(store, args.output, guild_id=args.guild_id)
    except StorageError as e:
        logger.error(f"Database error: {e}")
        sys.exit(1)
    finally:
        await conn.close()


def main():
    load_dotenv()

    parser = argparse.ArgumentParser(
        description="Cron Inspector CLI - Inspect and manage persisted cron jobs"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    # List command
    list_parser = subparsers.add_parser("list", help="List cron jobs")
    list_parser.add_argument("--guild-id", type=int, help="Filter by guild ID")
    list_parser.add_argument(
        "--verbose", "-v", action="store_true", help="Show full details"
    )

    # Inspect command
    inspect_parser = subparsers.add_parser("inspect", help="Inspect a specific cron job")
    inspect_parser.add_argument("--job-id", type=int, required=True, help="Job ID")

    # Delete command
    delete_parser = subparsers.add_parser("delete", help="Delete a cron job")
    delete_parser.add_argument("--job-id", type=int, required=True, help="Job ID")

    # Export command
    export_parser = subparsers.add_parser("export", help="Export cron jobs to JSON")
    export_parser.add_argument(
        "--output", "-o", required=True, help="Output file path"
    )
    export_parser.add_argument("--guild-id", type=int, help="Filter by guild ID")

    args = parser.parse_args()
    asyncio.run(main_async(args))


if __name__ == "__main__":
    main()
