"""Shared pytest fixtures for floe-partitions tests."""

from __future__ import annotations

import sys
from collections.abc import Callable
from typing import Any
from unittest.mock import MagicMock

import pytest
import structlog
from pyiceberg.partitioning import PartitionField, PartitionSpec
from pyiceberg.schema import Schema
from pyiceberg.transforms import Transform
from pyiceberg.types import LongType, NestedField, StringType, TimestampType


@pytest.fixture(autouse=True)
def configure_structlog_for_tests() -> None:
    """Configure structlog to output to stdout for test capture."""
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=False,  # Important for test isolation
    )


@pytest.fixture
def events_schema() -> Schema:
    """Iceberg schema for an events table."""
    return Schema(
        NestedField(field_id=1, name="id", field_type=LongType(), required=False),
        NestedField(field_id=2, name="ts", field_type=TimestampType(), required=False),
        NestedField(field_id=3, name="region", field_type=StringType(), required=False),
        NestedField(field_id=4, name="name", field_type=StringType(), required=False),
    )


def _make_spec(schema: Schema, *fields: tuple[str, Transform[Any, Any], str]) -> PartitionSpec:
    return PartitionSpec(
        *(
            PartitionField(
                source_id=schema.find_field(column).field_id,
                field_id=1000 + i,
                transform=transform,
                name=name,
            )
            for i, (column, transform, name) in enumerate(fields)
        )
    )


def _make_table(schema: Schema, spec: PartitionSpec) -> MagicMock:
    table = MagicMock()
    table.schema.return_value = schema
    table.spec.return_value = spec
    return table


@pytest.fixture
def make_spec() -> Callable[..., PartitionSpec]:
    """Factory for PartitionSpecs from (source column, transform, field name) triples."""
    return _make_spec


@pytest.fixture
def make_table() -> Callable[[Schema, PartitionSpec], MagicMock]:
    """Factory for mock PyIceberg Tables with a given schema and current spec."""
    return _make_table
