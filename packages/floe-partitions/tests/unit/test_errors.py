"""Unit tests for floe-partitions custom exceptions."""

from __future__ import annotations

from floe_partitions.errors import (
    FloeStorageError,
    PartitionSpecError,
    TableNotFoundError,
    TransformParseError,
)


class TestFloeStorageError:
    """Tests for the base exception."""

    def test_message_only(self) -> None:
        """Test str() without details."""
        error = FloeStorageError("Something failed")

        assert str(error) == "Something failed"
        assert error.details == {}

    def test_with_details(self) -> None:
        """Test str() renders details."""
        error = FloeStorageError("Something failed", details={"table": "bronze.events"})

        assert str(error) == "Something failed (table=bronze.events)"


class TestTableNotFoundError:
    """Tests for TableNotFoundError."""

    def test_basic_creation(self) -> None:
        """Test default message includes the table."""
        error = TableNotFoundError(table="bronze.events")

        assert error.table == "bronze.events"
        assert "Table not found: bronze.events" in str(error)
        assert isinstance(error, FloeStorageError)


class TestPartitionSpecError:
    """Tests for PartitionSpecError."""

    def test_default_message(self) -> None:
        """Test default message."""
        error = PartitionSpecError()

        assert "Invalid partition spec" in str(error)
        assert error.source_column is None
        assert error.transform is None

    def test_with_all_details(self) -> None:
        """Test source column and transform are recorded."""
        error = PartitionSpecError(
            "Source column 'ts' not found in schema",
            source_column="ts",
            transform="day",
        )

        assert error.source_column == "ts"
        assert error.transform == "day"
        assert error.details == {"source_column": "ts", "transform": "day"}
        assert isinstance(error, FloeStorageError)


class TestTransformParseError:
    """Tests for TransformParseError."""

    def test_default_message(self) -> None:
        """Test default message quotes the expression."""
        error = TransformParseError("bucket(id")

        assert error.expression == "bucket(id"
        assert "Cannot parse partition transform: 'bucket(id'" in str(error)
        assert error.details["expression"] == "bucket(id"

    def test_is_partition_spec_error(self) -> None:
        """Test TransformParseError can be caught as PartitionSpecError."""
        assert isinstance(TransformParseError("x("), PartitionSpecError)
