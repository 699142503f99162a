"""
Environment bootloader.

Used by:
1. Application startup (main.py) -> mode="critical"
2. CI pipelines -> mode="dry-run"
3. Manual checks -> ``python -m userapi.boot --mode critical``
"""

import asyncio
import sys
from dataclasses import dataclass
from enum import Enum
from typing import Any

from sqlalchemy import text

from userapi.config import settings
from userapi.logger import async_log_timing, get_logger

logger = get_logger(__name__)


class BootMode(str, Enum):
    CRITICAL = "critical"  # Config + DB (fast fail for startup)
    DRY_RUN = "dry-run"  # Static config check only


@dataclass
class ServiceStatus:
    service: str
    status: str  # 'ok', 'error', 'skipped'
    message: str
    duration_ms: float = 0.0


class Bootloader:
    """Handles environment validation and database connectivity checks."""

    @staticmethod
    async def validate(mode: BootMode = BootMode.CRITICAL) -> bool:
        """Run validation checks. Returns True if passed, False if failed.

        If mode is CRITICAL, this calls sys.exit(1) on failure.
        """
        logger.info("Bootloader starting validation", mode=mode.value)

        if not Bootloader._check_static_config():
            if mode == BootMode.CRITICAL:
                logger.critical("Static configuration check failed. Refusing to start.")
                sys.exit(1)
            return False

        if mode == BootMode.DRY_RUN:
            logger.info("Dry-run configuration check passed")
            return True

        result = await Bootloader._check_database()
        if result.status == "error":
            logger.error(
                "Service check failed",
                service=result.service,
                error=result.message,
                duration_ms=result.duration_ms,
            )
            if mode == BootMode.CRITICAL:
                logger.critical("Critical service checks failed. Application cannot start.")
                sys.exit(1)
            return False

        logger.info(
            "Service check passed",
            service=result.service,
            duration_ms=result.duration_ms,
        )
        logger.info("Bootloader validation successful")
        return True

    @staticmethod
    def _check_static_config() -> bool:
        """Verify DATABASE_URL is present and looks like a URL."""
        url = settings.database_url
        if not url or "://" not in url:
            logger.error("Configuration load failed", error="DATABASE_URL is not a URL")
            return False
        return True

    @staticmethod
    async def _check_database() -> ServiceStatus:
        """Verify database connectivity (SELECT 1) through the shared engine."""
        from userapi.database import engine

        timing: dict[str, Any] = {}
        try:
            async with async_log_timing("database_check", logger=logger, level="debug") as timing:
                async with engine.connect() as conn:
                    await conn.execute(text("SELECT 1"))
        except Exception as e:
            return ServiceStatus("database", "error", str(e), timing.get("duration_ms", 0.0))

        return ServiceStatus("database", "ok", "Connection successful", timing["duration_ms"])


if __name__ == "__main__":
    import argparse

    from userapi.logger import configure_logging

    parser = argparse.ArgumentParser()
    parser.add_argument("--mode", type=str, default="critical", choices=["critical", "dry-run"])
    args = parser.parse_args()

    configure_logging()
    try:
        success = asyncio.run(Bootloader.validate(BootMode(args.mode)))
    except KeyboardInterrupt:
        print("\nAborted.")
        sys.exit(130)

    sys.exit(0 if success else 1)
