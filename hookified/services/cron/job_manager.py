"""Scheduler jobs for CRON hooks, kept in pg_cron.

Each CRON hook owns one job named ``hook_<hookId>``. The job posts to the
hook's execution endpoint through pg_net with the shared cron secret, so
the job can always be found again from the hook id alone.
"""

import json
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Protocol

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError

from hookified.constants import API_PREFIX, APP_URL, CRON_JOB_PREFIX, CRON_SECRET
from hookified.db import db_client
from hookified.services.hooks.errors import SchedulerError


class SchedulerBridge(Protocol):
    async def execute(
        self, query: str, params: Optional[Dict[str, Any]] = None
    ) -> List[Dict[str, Any]]: ...


class SqlSchedulerBridge:
    """Issues scheduler commands as SQL on the application database."""

    async def execute(
        self, query: str, params: Optional[Dict[str, Any]] = None
    ) -> List[Dict[str, Any]]:
        try:
            return await db_client.execute_raw_query(query, params)
        except SQLAlchemyError as e:
            raise SchedulerError(f"Scheduler command failed: {e}") from e


@dataclass
class CronJobStatus:
    exists: bool
    active: bool = False
    job_name: Optional[str] = None
    schedule: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "exists": self.exists,
            "active": self.active,
            "jobName": self.job_name,
            "schedule": self.schedule,
        }


def job_name_for(hook_id: str) -> str:
    return f"{CRON_JOB_PREFIX}{hook_id}"


def hook_id_from_job_name(job_name: str) -> Optional[str]:
    if job_name and job_name.startswith(CRON_JOB_PREFIX):
        return job_name[len(CRON_JOB_PREFIX) :]
    return None


def _sql_literal(value: str) -> str:
    return "'" + value.replace("'", "''") + "'"


class CronJobManager:
    def __init__(
        self,
        bridge: Optional[SchedulerBridge] = None,
        app_url: Optional[str] = None,
        cron_secret: Optional[str] = None,
    ):
        self.bridge = bridge or SqlSchedulerBridge()
        self.app_url = (app_url or APP_URL).rstrip("/")
        self.cron_secret = cron_secret if cron_secret is not None else CRON_SECRET

    def execution_endpoint(self, hook_id: str) -> str:
        return f"{self.app_url}{API_PREFIX}/cron/execute/{hook_id}"

    def build_job_command(self, hook_id: str) -> str:
        """SQL the scheduler runs on every tick for this hook."""
        headers = json.dumps(
            {"Content-Type": "application/json", "x-cron-secret": self.cron_secret or ""}
        )
        return (
            "SELECT net.http_post("
            f"url := {_sql_literal(self.execution_endpoint(hook_id))}, "
            f"headers := {_sql_literal(headers)}::jsonb, "
            "body := '{}'::jsonb"
            ") AS request_id"
        )

    async def create_job(self, hook_id: str, cron_expression: str) -> None:
        job_name = job_name_for(hook_id)
        logger.info(f"Creating cron job {job_name} with schedule {cron_expression}")
        await self.bridge.execute(
            "SELECT cron.schedule(:job_name, :schedule, :command)",
            {
                "job_name": job_name,
                "schedule": cron_expression,
                "command": self.build_job_command(hook_id),
            },
        )

    async def pause_job(self, hook_id: str) -> None:
        await self._set_active(hook_id, False)

    async def resume_job(self, hook_id: str) -> None:
        await self._set_active(hook_id, True)

    async def _set_active(self, hook_id: str, active: bool) -> None:
        job_name = job_name_for(hook_id)
        logger.info(f"{'Resuming' if active else 'Pausing'} cron job {job_name}")
        await self.bridge.execute(
            "SELECT cron.alter_job(job_id := jobid, active := :active) "
            "FROM cron.job WHERE jobname = :job_name",
            {"job_name": job_name, "active": active},
        )

    async def update_schedule(self, hook_id: str, cron_expression: str) -> None:
        job_name = job_name_for(hook_id)
        logger.info(f"Updating cron job {job_name} schedule to {cron_expression}")
        await self.bridge.execute(
            "SELECT cron.alter_job(job_id := jobid, schedule := :schedule) "
            "FROM cron.job WHERE jobname = :job_name",
            {"job_name": job_name, "schedule": cron_expression},
        )

    async def delete_job(self, hook_id: str) -> None:
        job_name = job_name_for(hook_id)
        logger.info(f"Deleting cron job {job_name}")
        await self.bridge.execute(
            "SELECT cron.unschedule(:job_name)", {"job_name": job_name}
        )

    async def get_job_status(self, hook_id: str) -> CronJobStatus:
        job_name = job_name_for(hook_id)
        try:
            rows = await self.bridge.execute(
                "SELECT jobname, schedule, active FROM cron.job WHERE jobname = :job_name",
                {"job_name": job_name},
            )
        except SchedulerError as e:
            logger.warning(f"Could not read status of cron job {job_name}: {e}")
            return CronJobStatus(exists=False)

        if not rows:
            return CronJobStatus(exists=False)
        row = rows[0]
        return CronJobStatus(
            exists=True,
            active=bool(row.get("active")),
            job_name=row.get("jobname"),
            schedule=row.get("schedule"),
        )

    async def list_jobs(self) -> List[Dict[str, Any]]:
        """All scheduler jobs following the hook naming convention."""
        rows = await self.bridge.execute(
            "SELECT jobid, jobname, schedule, active FROM cron.job "
            "WHERE jobname LIKE :pattern ORDER BY jobid",
            {"pattern": f"{CRON_JOB_PREFIX}%"},
        )
        return [
            {
                "jobId": row.get("jobid"),
                "jobName": row.get("jobname"),
                "schedule": row.get("schedule"),
                "active": bool(row.get("active")),
                "hookId": hook_id_from_job_name(row.get("jobname")),
            }
            for row in rows
        ]
