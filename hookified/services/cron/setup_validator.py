"""Checks that the scheduler prerequisites are in place.

Every check runs independently and reports on its own, so an operator can
see exactly which prerequisite is missing.
"""

import os
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from loguru import logger

from hookified.services.cron.job_manager import SchedulerBridge, SqlSchedulerBridge
from hookified.services.hooks.errors import SchedulerError
from hookified.utils.time import utc_now

REQUIRED_ENV_VARS = {
    "CRON_SECRET": "Set CRON_SECRET so scheduled jobs can authenticate to the execution endpoint",
    "APP_URL": "Set APP_URL to the public base URL the scheduler should call",
    "DATABASE_URL": "Set DATABASE_URL to the Postgres database that hosts pg_cron",
}

REQUIRED_EXTENSIONS = {
    "pg_cron": "Enable the pg_cron extension: CREATE EXTENSION IF NOT EXISTS pg_cron;",
    "pg_net": "Enable the pg_net extension: CREATE EXTENSION IF NOT EXISTS pg_net;",
}


@dataclass
class CronSetupReport:
    is_valid: bool
    issues: List[str] = field(default_factory=list)
    instructions: List[str] = field(default_factory=list)
    environment_variables: Dict[str, bool] = field(default_factory=dict)
    extensions: Dict[str, bool] = field(default_factory=dict)
    bridge_reachable: bool = False
    permissions: bool = False
    checked_at: Optional[str] = None

    def summary(self) -> dict:
        checks = [
            *self.environment_variables.values(),
            *self.extensions.values(),
            self.bridge_reachable,
            self.permissions,
        ]
        passed = sum(1 for c in checks if c)
        return {
            "total": len(checks),
            "passed": passed,
            "failed": len(checks) - passed,
            "requiredEnvVars": len(self.environment_variables),
            "configuredEnvVars": sum(1 for c in self.environment_variables.values() if c),
        }

    def to_dict(self) -> dict:
        return {
            "isValid": self.is_valid,
            "issues": self.issues,
            "instructions": self.instructions,
            "details": {
                "environmentVariables": self.environment_variables,
                "databaseExtensions": self.extensions,
                "bridge": self.bridge_reachable,
                "permissions": self.permissions,
            },
            "summary": self.summary(),
            "checkedAt": self.checked_at,
        }


class CronSetupValidator:
    def __init__(self, bridge: Optional[SchedulerBridge] = None, environ=None):
        self.bridge = bridge or SqlSchedulerBridge()
        self.environ = environ if environ is not None else os.environ

    async def validate(self) -> CronSetupReport:
        report = CronSetupReport(is_valid=False)

        for name, instruction in REQUIRED_ENV_VARS.items():
            configured = bool(self.environ.get(name))
            report.environment_variables[name] = configured
            if not configured:
                report.issues.append(f"{name} environment variable is not set")
                report.instructions.append(instruction)

        report.bridge_reachable = await self._check_bridge(report)

        if report.bridge_reachable:
            await self._check_extensions(report)
            if report.extensions.get("pg_cron"):
                report.permissions = await self._check_permissions(report)
        else:
            report.extensions = {name: False for name in REQUIRED_EXTENSIONS}

        report.is_valid = not report.issues
        report.checked_at = utc_now().isoformat()
        if not report.is_valid:
            logger.warning(f"Cron setup incomplete: {'; '.join(report.issues)}")
        return report

    async def _check_bridge(self, report: CronSetupReport) -> bool:
        try:
            await self.bridge.execute("SELECT 1")
            return True
        except SchedulerError as e:
            report.issues.append(f"Scheduler command bridge is not reachable: {e}")
            report.instructions.append("Check DATABASE_URL and that the database is reachable")
            return False

    async def _check_extensions(self, report: CronSetupReport) -> None:
        try:
            rows = await self.bridge.execute(
                "SELECT extname FROM pg_extension WHERE extname IN ('pg_cron', 'pg_net')"
            )
            installed = {row.get("extname") for row in rows}
        except SchedulerError as e:
            report.issues.append(f"Cannot check database extensions: {e}")
            installed = set()

        for name, instruction in REQUIRED_EXTENSIONS.items():
            enabled = name in installed
            report.extensions[name] = enabled
            if not enabled:
                report.issues.append(f"{name} extension is not enabled")
                report.instructions.append(instruction)

    async def _check_permissions(self, report: CronSetupReport) -> bool:
        test_job = f"setup_check_{int(utc_now().timestamp() * 1000)}"
        try:
            await self.bridge.execute(
                "SELECT cron.schedule(:job_name, '* * * * *', 'SELECT 1')",
                {"job_name": test_job},
            )
        except SchedulerError as e:
            report.issues.append(f"Cannot create a test cron job: {e}")
            report.instructions.append(
                "Grant the application role USAGE on schema cron and EXECUTE on cron.schedule"
            )
            return False

        try:
            await self.bridge.execute("SELECT cron.unschedule(:job_name)", {"job_name": test_job})
        except SchedulerError as e:
            logger.warning(f"Failed to remove test cron job {test_job}: {e}")
        return True
