"""Integration tests for partition spec evolution against a real catalog.

Uses a PyIceberg SqlCatalog backed by a temporary SQLite database and a
local file warehouse, so no external services are needed.

Run with:
    pytest packages/floe-partitions/tests/integration -m integration
"""

from __future__ import annotations

from pathlib import Path

import pytest
from pyiceberg.schema import Schema
from pyiceberg.transforms import BucketTransform, DayTransform, IdentityTransform

from floe_partitions.config import PartitionTransforms
from floe_partitions.context import QueryContext
from floe_partitions.evolution import evolve_table_spec
from floe_partitions.partitions import build_partition_spec

pytest.importorskip("sqlalchemy")

from pyiceberg.catalog.sql import SqlCatalog  # noqa: E402

pytestmark = pytest.mark.integration

TABLE = "bronze.events"


@pytest.fixture
def catalog(tmp_path: Path) -> SqlCatalog:
    """Create a SQLite-backed catalog with a bronze namespace."""
    catalog = SqlCatalog(
        "test",
        uri=f"sqlite:///{tmp_path}/catalog.db",
        warehouse=f"file://{tmp_path}/warehouse",
    )
    catalog.create_namespace("bronze")
    return catalog


def _create_table(catalog: SqlCatalog, schema: Schema, *expressions: str) -> None:
    catalog.create_table(
        TABLE,
        schema=schema,
        partition_spec=build_partition_spec(
            PartitionTransforms.from_expressions(expressions), schema
        ),
    )


def _field_names(catalog: SqlCatalog) -> list[str]:
    return [field.name for field in catalog.load_table(TABLE).spec().fields]


class TestSqlCatalogEvolution:
    """End-to-end evolution through a SqlCatalog."""

    def test_partition_unpartitioned_table(
        self, catalog: SqlCatalog, events_schema: Schema
    ) -> None:
        """Test requested fields are added in declaration order."""
        _create_table(catalog, events_schema)

        with QueryContext(PartitionTransforms.from_expressions(["day(ts)", "region"])) as context:
            result = evolve_table_spec(context, catalog, TABLE)

        assert result is not None
        assert result.added == ("ts_day", "region")
        spec = catalog.load_table(TABLE).spec()
        assert [f.name for f in spec.fields] == ["ts_day", "region"]
        assert [f.transform for f in spec.fields] == [DayTransform(), IdentityTransform()]

    def test_remove_and_add(self, catalog: SqlCatalog, events_schema: Schema) -> None:
        """Test {region, ts_day} -> {ts_day, id_bucket}."""
        _create_table(catalog, events_schema, "region", "day(ts)")

        with QueryContext(
            PartitionTransforms.from_expressions(["day(ts)", "bucket(16, id)"])
        ) as context:
            result = evolve_table_spec(context, catalog, TABLE)

        assert result is not None
        assert result.removed == ("region",)
        assert result.added == ("id_bucket",)
        spec = catalog.load_table(TABLE).spec()
        assert sorted(f.name for f in spec.fields) == ["id_bucket", "ts_day"]
        bucket = next(f for f in spec.fields if f.name == "id_bucket")
        assert bucket.transform == BucketTransform(16)

    def test_same_names_leave_spec_unchanged(
        self, catalog: SqlCatalog, events_schema: Schema
    ) -> None:
        """Test a bucket count change on an existing field name is not applied."""
        _create_table(catalog, events_schema, "bucket(8, id)")
        spec_before = catalog.load_table(TABLE).spec()

        with QueryContext(PartitionTransforms.from_expressions(["bucket(32, id)"])) as context:
            result = evolve_table_spec(context, catalog, TABLE)

        assert result is not None
        assert not result.changed
        assert catalog.load_table(TABLE).spec() == spec_before

    def test_no_request_leaves_metadata_untouched(
        self, catalog: SqlCatalog, events_schema: Schema
    ) -> None:
        """Test nothing is committed when no layout was requested."""
        _create_table(catalog, events_schema, "region")
        location_before = catalog.load_table(TABLE).metadata_location

        with QueryContext() as context:
            assert evolve_table_spec(context, catalog, TABLE) is None

        assert catalog.load_table(TABLE).metadata_location == location_before

    def test_failed_addition_keeps_current_spec(
        self, catalog: SqlCatalog, events_schema: Schema
    ) -> None:
        """Test a rejected addition also discards the queued removal."""
        _create_table(catalog, events_schema, "region")

        # Two time transforms on one column cannot be added in a single update
        with QueryContext(
            PartitionTransforms.from_expressions(["day(ts)", "hour(ts)"])
        ) as context, pytest.raises(ValueError):
            evolve_table_spec(context, catalog, TABLE)

        assert _field_names(catalog) == ["region"]
