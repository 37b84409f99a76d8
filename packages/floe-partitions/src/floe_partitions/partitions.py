"""Partition spec building from transform declarations.

This module provides:
- partition_field_name: Iceberg-style partition field naming
- to_iceberg_transform: PartitionTransform to PyIceberg Transform mapping
- build_partition_spec: PartitionSpec from an ordered list of declarations
- requested_spec: PartitionSpec for the transforms requested by a query
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

import pyarrow as pa
from pyiceberg.partitioning import PartitionField, PartitionSpec
from pyiceberg.schema import Schema
from pyiceberg.transforms import (
    BucketTransform,
    DayTransform,
    HourTransform,
    IdentityTransform,
    MonthTransform,
    Transform,
    TruncateTransform,
    YearTransform,
)

from floe_partitions.config import PartitionTransform, PartitionTransforms, PartitionTransformType
from floe_partitions.errors import PartitionSpecError
from floe_partitions.observability import get_logger

if TYPE_CHECKING:
    from pyiceberg.types import NestedField
    from structlog.stdlib import BoundLogger

    from floe_partitions.context import QueryContext

# Partition field IDs start at 1000
PARTITION_FIELD_ID_START = 1000

_TIME_TRANSFORMS: dict[PartitionTransformType, type[Transform[Any, Any]]] = {
    PartitionTransformType.YEAR: YearTransform,
    PartitionTransformType.MONTH: MonthTransform,
    PartitionTransformType.DAY: DayTransform,
    PartitionTransformType.HOUR: HourTransform,
}

_NAME_SUFFIXES: dict[PartitionTransformType, str] = {
    PartitionTransformType.YEAR: "year",
    PartitionTransformType.MONTH: "month",
    PartitionTransformType.DAY: "day",
    PartitionTransformType.HOUR: "hour",
    PartitionTransformType.BUCKET: "bucket",
    PartitionTransformType.TRUNCATE: "trunc",
}


def partition_field_name(transform: PartitionTransform) -> str:
    """Return the partition field name for a declaration.

    Identity fields take the source column name; every other transform
    appends a suffix (``ts_day``, ``id_bucket``, ``name_trunc``). The
    parameter is not part of the name.

    Example:
        >>> partition_field_name(PartitionTransform.from_expression("bucket(16, id)"))
        'id_bucket'
    """
    if transform.transform_type == PartitionTransformType.IDENTITY:
        return transform.source_column
    return f"{transform.source_column}_{_NAME_SUFFIXES[transform.transform_type]}"


def to_iceberg_transform(transform: PartitionTransform) -> Transform[Any, Any]:
    """Convert PartitionTransform to PyIceberg Transform.

    Raises:
        PartitionSpecError: If BUCKET or TRUNCATE has no parameter.
    """
    transform_type = transform.transform_type

    if transform_type == PartitionTransformType.IDENTITY:
        return IdentityTransform()

    if transform_type in _TIME_TRANSFORMS:
        # Mypy thinks Transform requires 'root' arg but concrete subclasses
        # like DayTransform() take no arguments - suppress false positive
        return _TIME_TRANSFORMS[transform_type]()  # type: ignore[call-arg]

    if transform.param is None:
        raise PartitionSpecError(
            f"{transform_type.value.upper()} transform requires param",
            source_column=transform.source_column,
            transform=transform_type.value,
        )

    if transform_type == PartitionTransformType.BUCKET:
        return BucketTransform(transform.param)
    return TruncateTransform(transform.param)


def to_iceberg_schema(schema: pa.Schema | Schema) -> Schema:
    """Convert schema to Iceberg Schema, assigning fresh field IDs.

    PyArrow schemas are converted with placeholder IDs and then numbered
    sequentially from 1, the same way Catalog.create_table() does it.
    """
    if isinstance(schema, Schema):
        return schema

    from pyiceberg.io.pyarrow import _ConvertToIcebergWithoutIDs, visit_pyarrow
    from pyiceberg.schema import assign_fresh_schema_ids

    iceberg_schema_without_ids = visit_pyarrow(
        schema,
        _ConvertToIcebergWithoutIDs(),
    )
    return assign_fresh_schema_ids(iceberg_schema_without_ids)


def _find_field(schema: Schema, name: str) -> NestedField | None:
    # PyIceberg's find_field raises ValueError if not found (doesn't return None)
    try:
        return schema.find_field(name)
    except ValueError:
        return None


def build_partition_spec(
    transforms: PartitionTransforms | Iterable[PartitionTransform],
    schema: pa.Schema | Schema,
) -> PartitionSpec:
    """Build a PartitionSpec from an ordered list of transforms.

    One partition field is produced per declaration, in declaration order.
    An empty list yields an unpartitioned spec.

    Args:
        transforms: Partition transform declarations.
        schema: Table schema for source column lookup.

    Returns:
        PyIceberg PartitionSpec.

    Raises:
        PartitionSpecError: If a source column is missing, two declarations
            share a partition field name, or a non-identity field name
            collides with another schema column.

    Example:
        >>> transforms = PartitionTransforms.from_expressions(["day(ts)", "region"])
        >>> [f.name for f in build_partition_spec(transforms, schema).fields]
        ['ts_day', 'region']
    """
    if isinstance(transforms, PartitionTransforms):
        transforms = transforms.transforms

    iceberg_schema = to_iceberg_schema(schema)

    fields: list[PartitionField] = []
    names: set[str] = set()
    for i, transform in enumerate(transforms):
        source_field = _find_field(iceberg_schema, transform.source_column)
        if source_field is None:
            raise PartitionSpecError(
                f"Source column '{transform.source_column}' not found in schema",
                source_column=transform.source_column,
                transform=transform.transform_type.value,
            )

        name = partition_field_name(transform)
        if name in names:
            raise PartitionSpecError(
                f"Duplicate partition field name: {name}",
                source_column=transform.source_column,
                transform=transform.transform_type.value,
            )
        if (
            transform.transform_type != PartitionTransformType.IDENTITY
            and _find_field(iceberg_schema, name) is not None
        ):
            raise PartitionSpecError(
                f"Partition field name '{name}' conflicts with a schema column",
                source_column=transform.source_column,
                transform=transform.transform_type.value,
            )
        names.add(name)

        fields.append(
            PartitionField(
                source_id=source_field.field_id,
                field_id=PARTITION_FIELD_ID_START + i,
                transform=to_iceberg_transform(transform),
                name=name,
            )
        )

    return PartitionSpec(*fields)


def requested_spec(
    context: QueryContext,
    schema: pa.Schema | Schema,
    *,
    logger: BoundLogger | None = None,
) -> PartitionSpec | None:
    """Build the partition spec requested by the current query.

    Returns None when the query requested no partition layout. None means
    "leave the table spec alone"; an empty PartitionSpec means "make the
    table unpartitioned".

    Args:
        context: The current query context.
        schema: Table schema for source column lookup.
        logger: Optional structlog logger.

    Returns:
        PartitionSpec, or None if no transforms were requested.
    """
    requested = context.partition_transforms
    if requested is None:
        (logger or get_logger()).debug("partition_transforms_not_in_query_context")
        return None
    return build_partition_spec(requested, schema)
