import dataclasses
import json

import pytest

from orderfoodonline.models import Migration, Product
from orderfoodonline.repository.base import ProductRepository
from orderfoodonline.service.migrations import (
    MigrationService,
    extract_version,
    is_migration_filename,
)


class FakeProductRepository(ProductRepository):
    def __init__(self, applied=None, fail_insert=False, fail_update=False):
        self.applied = list(applied or [])
        self.fail_insert = fail_insert
        self.fail_update = fail_update
        self.batches = []
        self.inserted = []
        self.updates = []

    def list_products(self):
        return [product for batch in self.batches for product in batch]

    def find_product_by_id(self, product_id):
        return next((p for p in self.list_products() if p.id == product_id), None)

    def bulk_insert_products(self, products):
        if self.fail_insert:
            raise RuntimeError("insert failed")
        self.batches.append(list(products))

    def get_applied_migrations(self):
        return list(self.applied)

    def insert_migration(self, migration):
        self.inserted.append(dataclasses.replace(migration))

    def update_migration(self, migration):
        if self.fail_update:
            raise RuntimeError("update failed")
        self.updates.append(dataclasses.replace(migration))


def _products(count):
    return [
        {"id": str(n), "name": f"Item {n}", "price": 1.5, "category": "Waffle"}
        for n in range(count)
    ]


def _write(directory, name, version, products, description="seed"):
    payload = {"version": version, "description": description, "products": products}
    (directory / name).write_text(json.dumps(payload))


@pytest.mark.parametrize(
    "filename, expected",
    [
        ("0001_init_product_catalog.json", True),
        ("0002_more.json", True),
        ("init.json", False),
        ("0001.json", False),
        ("001_short.json", False),
        ("abcd_letters.json", False),
        ("00001_long.json", False),
    ],
)
def test_is_migration_filename(filename, expected):
    assert is_migration_filename(filename) is expected


def test_extract_version():
    assert extract_version("0001_init_product_catalog.json") == "0001"
    assert extract_version("0002_more") == "0002"


def test_run_migrations_seeds_products_and_records_completion(tmp_path):
    _write(tmp_path, "0001_init_product_catalog.json", "0001", _products(3), "init")
    repo = FakeProductRepository()

    MigrationService(repo).run_migrations(str(tmp_path))

    assert [p.id for p in repo.list_products()] == ["0", "1", "2"]
    assert repo.list_products()[0] == Product(id="0", name="Item 0", price=1.5, category="Waffle")
    assert [(m.version, m.status) for m in repo.inserted] == [("0001", "in_progress")]
    assert [m.status for m in repo.updates] == ["completed"]
    assert repo.updates[0].id == repo.inserted[0].id
    assert repo.inserted[0].description == "init"


def test_run_migrations_skips_applied_versions(tmp_path):
    _write(tmp_path, "0001_init.json", "0001", _products(2))
    repo = FakeProductRepository(applied=[Migration(version="0001", status="completed")])

    MigrationService(repo).run_migrations(str(tmp_path))

    assert repo.batches == []
    assert repo.inserted == []


def test_run_migrations_applies_in_version_order(tmp_path):
    _write(tmp_path, "0002_second.json", "0002", _products(1))
    _write(tmp_path, "0001_first.json", "0001", _products(1))
    repo = FakeProductRepository()

    MigrationService(repo).run_migrations(str(tmp_path))

    assert [m.version for m in repo.inserted] == ["0001", "0002"]


def test_seeding_is_split_into_batches_of_at_most_one_hundred(tmp_path):
    _write(tmp_path, "0001_big.json", "0001", _products(250))
    repo = FakeProductRepository()

    MigrationService(repo).run_migrations(str(tmp_path))

    sizes = [len(batch) for batch in repo.batches]
    assert all(size <= 100 for size in sizes)
    assert sum(sizes) == 250
    assert len(repo.list_products()) == 250


def test_failed_seed_marks_migration_failed(tmp_path):
    _write(tmp_path, "0001_init.json", "0001", _products(2))
    repo = FakeProductRepository(fail_insert=True)

    with pytest.raises(RuntimeError, match="failed to seed products"):
        MigrationService(repo).run_migrations(str(tmp_path))

    assert [m.status for m in repo.updates] == ["failed"]


def test_failed_status_update_is_reported(tmp_path):
    _write(tmp_path, "0001_init.json", "0001", _products(1))
    repo = FakeProductRepository(fail_update=True)

    with pytest.raises(RuntimeError, match="failed to update migration status"):
        MigrationService(repo).run_migrations(str(tmp_path))


def test_migration_without_products_completes(tmp_path):
    _write(tmp_path, "0001_empty.json", "0001", [])
    repo = FakeProductRepository()

    MigrationService(repo).run_migrations(str(tmp_path))

    assert repo.batches == []
    assert [m.status for m in repo.updates] == ["completed"]


def test_non_migration_files_are_ignored(tmp_path):
    _write(tmp_path, "catalog.json", "0001", _products(2))
    (tmp_path / "0001_notes.txt").write_text("not json")
    repo = FakeProductRepository()

    MigrationService(repo).run_migrations(str(tmp_path))

    assert repo.inserted == []
    assert repo.batches == []


def test_invalid_json_raises(tmp_path):
    (tmp_path / "0001_broken.json").write_text("{not json")
    repo = FakeProductRepository()

    with pytest.raises(RuntimeError, match="failed to parse migration file"):
        MigrationService(repo).run_migrations(str(tmp_path))
    assert repo.inserted == []


def test_missing_directory_raises(tmp_path):
    repo = FakeProductRepository()

    with pytest.raises(RuntimeError, match="failed to get migration files"):
        MigrationService(repo).run_migrations(str(tmp_path / "missing"))