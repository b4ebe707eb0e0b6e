"""Applies JSON migration files that seed the product catalog."""

from __future__ import annotations

import json
import logging
import os
import re
import time
import uuid
from pathlib import Path

from orderfoodonline.models import Migration, MigrationData, Product
from orderfoodonline.repository.base import ProductRepository

_JSON_SUFFIX = ".json"
_VERSION_PATTERN = re.compile(r"[+-]?[0-9]+")
_BATCH_SIZE = 100


def _stem(filename: str) -> str:
    if filename.endswith(_JSON_SUFFIX):
        return filename[: -len(_JSON_SUFFIX)]
    return filename


def is_migration_filename(filename: str) -> bool:
    """Return whether the name looks like ``0001_description.json``."""
    parts = _stem(filename).split("_")
    if len(parts) < 2:
        return False
    head = parts[0]
    return len(head) == 4 and _VERSION_PATTERN.fullmatch(head) is not None


def extract_version(filename: str) -> str:
    """Return the version prefix of a migration file name."""
    return _stem(filename).split("_")[0]


def _find_migration_files(directory: str) -> list[str]:
    """Return the names of migration files anywhere below the directory."""
    walk_errors: list[OSError] = []
    names = [
        name
        for _, _, files in os.walk(directory, onerror=walk_errors.append)
        for name in files
        if name.endswith(_JSON_SUFFIX) and is_migration_filename(name)
    ]
    if walk_errors:
        first = walk_errors[0]
        raise RuntimeError(f"failed to walk migrations directory: {first}") from first
    return names


class MigrationService:
    """Runs pending migrations and seeds products from them."""

    def __init__(self, repo: ProductRepository, logger: logging.Logger | None = None):
        self.repo = repo
        self.logger = logger or logging.getLogger(__name__)

    def run_migrations(self, migrations_dir: str) -> None:
        """Apply, in version order, every migration not yet recorded."""
        self.logger.info("Starting database migrations from directory: %s", migrations_dir)

        try:
            migration_files = _find_migration_files(migrations_dir)
        except RuntimeError as exc:
            raise RuntimeError(f"failed to get migration files: {exc}") from exc

        if not migration_files:
            self.logger.info("No migration files found")
            return

        migration_files.sort()

        try:
            applied = self.repo.get_applied_migrations()
        except Exception as exc:
            raise RuntimeError(f"failed to get applied migrations: {exc}") from exc
        applied_versions = {migration.version for migration in applied}

        for name in migration_files:
            version = extract_version(name)
            if version in applied_versions:
                self.logger.info("Migration %s already applied, skipping", version)
                continue

            self.logger.info("Applying migration: %s", name)
            try:
                self._apply_migration(Path(migrations_dir) / name)
            except Exception as exc:
                raise RuntimeError(f"failed to apply migration {name}: {exc}") from exc

        self.logger.info("Database migrations completed successfully")

    def _apply_migration(self, path: Path) -> None:
        try:
            raw = path.read_bytes()
        except OSError as exc:
            raise RuntimeError(f"failed to read migration file: {exc}") from exc

        try:
            decoded = json.loads(raw)
            data = MigrationData() if decoded is None else MigrationData.from_dict(decoded)
        except ValueError as exc:
            raise RuntimeError(f"failed to parse migration file: {exc}") from exc

        migration = Migration(
            id=str(uuid.uuid4()),
            version=data.version,
            description=data.description,
            applied_at=int(time.time()),
            status="in_progress",
        )

        try:
            self.repo.insert_migration(migration)
        except Exception as exc:
            raise RuntimeError(f"failed to insert migration record: {exc}") from exc

        try:
            self._seed_products(data.products)
        except Exception as exc:
            migration.status = "failed"
            try:
                self.repo.update_migration(migration)
            except Exception as update_exc:
                self.logger.error("Failed to update migration status: %s", update_exc)
            raise RuntimeError(f"failed to seed products: {exc}") from exc

        migration.status = "completed"
        try:
            self.repo.update_migration(migration)
        except Exception as exc:
            raise RuntimeError(f"failed to update migration status: {exc}") from exc

        self.logger.info(
            "Successfully applied migration %s: %s", data.version, data.description
        )

    def _seed_products(self, products: list[Product]) -> None:
        if not products:
            return

        self.logger.info("Seeding %d products", len(products))
        for start in range(0, len(products), _BATCH_SIZE):
            batch = products[start : start + _BATCH_SIZE]
            try:
                self.repo.bulk_insert_products(batch)
            except Exception as exc:
                raise RuntimeError(f"failed to insert product batch: {exc}") from exc
            self.logger.info("Inserted batch of %d products", len(batch))