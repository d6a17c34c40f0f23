"""
Application startup validation and initialization.

This module performs startup checks and initialization to ensure the
application is properly configured before serving requests.
"""

import logging
import sys
from typing import List, Tuple

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from core.config import Settings, get_settings, validate_production_config

logger = logging.getLogger(__name__)


class StartupValidator:
    """Validates application startup requirements"""

    def __init__(self, settings: Settings):
        self.settings = settings
        self.errors: List[str] = []
        self.warnings: List[str] = []

    def check_environment_config(self) -> bool:
        """Validate environment configuration"""
        try:
            validate_production_config(self.settings)
        except ValueError as e:
            self.errors.append(f"Configuration validation failed: {str(e)}")
            return False

        if self.settings.is_development and "*" in self.settings.cors_origins:
            self.warnings.append("CORS allows every origin")
        return True

    def check_database_connection(self) -> bool:
        """Check database connectivity (SQL order store only)"""
        if not self.settings.uses_sql_store:
            return True

        from core.database import engine

        try:
            with engine.connect() as conn:
                conn.execute(text("SELECT 1")).fetchone()
            logger.info("Database connection successful")
            return True
        except SQLAlchemyError as e:
            self.errors.append(f"Database connection failed: {str(e)}")
            return False

    def check_required_tables(self) -> bool:
        """Create the orders table when it does not exist yet"""
        if not self.settings.uses_sql_store:
            return True

        from core.database import Base, engine
        from modules.orders.models import order_models  # noqa: F401

        try:
            Base.metadata.create_all(bind=engine)
            return True
        except SQLAlchemyError as e:
            self.errors.append(f"Could not create database tables: {str(e)}")
            return False

    def validate_all(self) -> Tuple[bool, List[str], List[str]]:
        """Run all validation checks"""
        checks = [
            ("Environment Configuration", self.check_environment_config),
            ("Database Connection", self.check_database_connection),
            ("Database Tables", self.check_required_tables),
        ]

        all_passed = True

        for check_name, check_func in checks:
            logger.info(f"Running check: {check_name}")
            if not check_func():
                all_passed = False

        return all_passed, self.errors, self.warnings


def run_startup_checks(settings: Settings = None):
    """Run all startup validation checks"""
    settings = settings or get_settings()

    logger.info("=" * 60)
    logger.info("Starting Order Relay")
    logger.info(f"Environment: {settings.environment}")
    logger.info(f"Order store: {settings.order_store_backend}")
    logger.info("=" * 60)

    validator = StartupValidator(settings)
    passed, errors, warnings = validator.validate_all()

    if warnings:
        logger.warning("Startup Warnings:")
        for warning in warnings:
            logger.warning(f"  {warning}")

    if errors:
        logger.error("Startup Errors:")
        for error in errors:
            logger.error(f"  {error}")

    if not passed and settings.is_production:
        logger.error("Cannot start in production with errors!")
        sys.exit(1)
    elif not passed:
        logger.warning("Starting in development mode despite errors")
    else:
        logger.info("All startup checks passed")

    logger.info("=" * 60)
    logger.info(f"POS server running at http://{settings.host}:{settings.port}")
    logger.info("Orders API:   /api/orders")
    logger.info("Order stream: /api/stream")
    logger.info("=" * 60)

    return passed, warnings


def configure_startup_logging(level: str = "INFO"):
    """Configure logging for startup"""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
