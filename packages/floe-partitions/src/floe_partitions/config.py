"""Pydantic configuration models for floe-partitions.

This module provides:
- TableIdentifier: Table identifier model
- PartitionTransformType: Enum for partition transform types
- PartitionTransform: One partition transform declaration
- PartitionTransforms: Ordered set of requested partition transforms
- PartitionEvolutionConfig: YAML-loadable partition evolution request
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from enum import Enum
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from typing_extensions import Self

from floe_partitions.errors import TransformParseError

# "bucket(16, id)", "day(ts)" or a bare column name ("region")
_CALL_PATTERN = re.compile(r"^\s*(\w+)\s*\(\s*(?:(\d+)\s*,\s*)?([\w.]+)\s*\)\s*$")
_COLUMN_PATTERN = re.compile(r"^\s*([\w.]+)\s*$")


class TableIdentifier(BaseModel):
    """Iceberg table identifier with namespace and name.

    Represents a fully qualified table identifier in the format
    "namespace.table_name". Supports nested namespaces.

    Attributes:
        namespace: Namespace (can be nested, e.g., "bronze.raw").
        name: Table name without namespace prefix.

    Example:
        >>> tid = TableIdentifier(namespace="bronze", name="events")
        >>> str(tid)
        'bronze.events'
        >>> TableIdentifier.from_string("bronze.raw.events").as_tuple()
        ('bronze', 'raw', 'events')
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    namespace: str = Field(
        ...,
        min_length=1,
        description="Namespace (can be nested with dots)",
    )
    name: str = Field(
        ...,
        min_length=1,
        description="Table name",
    )

    def __str__(self) -> str:
        """Return fully qualified table identifier."""
        return f"{self.namespace}.{self.name}"

    def as_tuple(self) -> tuple[str, ...]:
        """Return the identifier as a PyIceberg identifier tuple."""
        return (*self.namespace.split("."), self.name)

    @classmethod
    def from_string(cls, identifier: str) -> TableIdentifier:
        """Parse table identifier from string.

        Args:
            identifier: Table identifier string (namespace.table).

        Returns:
            TableIdentifier instance.

        Raises:
            ValueError: If identifier format is invalid.
        """
        parts = identifier.rsplit(".", 1)
        if len(parts) != 2:
            msg = f"Invalid table identifier format: {identifier}. Expected 'namespace.table'"
            raise ValueError(msg)
        return cls(namespace=parts[0], name=parts[1])

    @field_validator("name")
    @classmethod
    def validate_name_no_dots(cls, v: str) -> str:
        """Validate that table name doesn't contain dots."""
        if "." in v:
            msg = f"Table name cannot contain dots: {v}"
            raise ValueError(msg)
        return v


class PartitionTransformType(str, Enum):
    """Iceberg partition transform types.

    Defines how partition values are computed from source columns:
    - IDENTITY: Use column value as-is
    - YEAR: Extract year from date/timestamp
    - MONTH: Extract year-month from date/timestamp
    - DAY: Extract date from date/timestamp
    - HOUR: Extract hour from timestamp
    - TRUNCATE: Truncate to width W
    - BUCKET: Hash into N buckets
    """

    IDENTITY = "identity"
    YEAR = "year"
    MONTH = "month"
    DAY = "day"
    HOUR = "hour"
    TRUNCATE = "truncate"
    BUCKET = "bucket"

    @property
    def requires_param(self) -> bool:
        """Return True for transforms that take a numeric parameter."""
        return self in (PartitionTransformType.TRUNCATE, PartitionTransformType.BUCKET)


# Spellings accepted in transform expressions (Spark/Hive DDL style)
_TRANSFORM_ALIASES: dict[str, PartitionTransformType] = {
    "identity": PartitionTransformType.IDENTITY,
    "year": PartitionTransformType.YEAR,
    "years": PartitionTransformType.YEAR,
    "month": PartitionTransformType.MONTH,
    "months": PartitionTransformType.MONTH,
    "day": PartitionTransformType.DAY,
    "days": PartitionTransformType.DAY,
    "date": PartitionTransformType.DAY,
    "hour": PartitionTransformType.HOUR,
    "hours": PartitionTransformType.HOUR,
    "date_hour": PartitionTransformType.HOUR,
    "truncate": PartitionTransformType.TRUNCATE,
    "trunc": PartitionTransformType.TRUNCATE,
    "bucket": PartitionTransformType.BUCKET,
}


class PartitionTransform(BaseModel):
    """Declaration of one partition transform on one source column.

    Attributes:
        source_column: Column to partition on.
        transform_type: Type of transform to apply.
        param: Width for TRUNCATE, bucket count for BUCKET. Must be
            absent for every other transform type.

    Example:
        >>> PartitionTransform(source_column="ts", transform_type=PartitionTransformType.DAY)
        >>> PartitionTransform.from_expression("bucket(16, customer_id)").param
        16
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    source_column: str = Field(
        ...,
        min_length=1,
        description="Source column name to partition on",
    )
    transform_type: PartitionTransformType = Field(
        ...,
        description="Type of partition transform",
    )
    param: int | None = Field(
        default=None,
        ge=1,
        description="Transform parameter (buckets for BUCKET, width for TRUNCATE)",
    )

    @model_validator(mode="after")
    def validate_param(self) -> Self:
        """Validate param is present exactly for transforms that take one."""
        if self.transform_type.requires_param and self.param is None:
            msg = f"Transform type {self.transform_type.value} requires 'param'"
            raise ValueError(msg)
        if not self.transform_type.requires_param and self.param is not None:
            msg = f"Transform type {self.transform_type.value} does not accept 'param'"
            raise ValueError(msg)
        return self

    def __str__(self) -> str:
        """Return the transform in expression form, e.g. ``bucket(16, id)``."""
        if self.param is not None:
            return f"{self.transform_type.value}({self.param}, {self.source_column})"
        return f"{self.transform_type.value}({self.source_column})"

    @classmethod
    def from_expression(cls, expression: str) -> PartitionTransform:
        """Parse a transform expression.

        Accepts a bare column (identity) or a call such as ``day(ts)``,
        ``months(ts)``, ``bucket(16, id)`` or ``truncate(4, name)``.

        Args:
            expression: Transform expression text.

        Returns:
            PartitionTransform instance.

        Raises:
            TransformParseError: If the expression is malformed, names an
                unknown transform, or has a wrong parameter arity.
        """
        column_match = _COLUMN_PATTERN.match(expression)
        if column_match:
            return cls(
                source_column=column_match.group(1),
                transform_type=PartitionTransformType.IDENTITY,
            )

        call_match = _CALL_PATTERN.match(expression)
        if call_match is None:
            raise TransformParseError(expression)

        name, param, column = call_match.groups()
        transform_type = _TRANSFORM_ALIASES.get(name.lower())
        if transform_type is None:
            raise TransformParseError(expression, f"Unknown partition transform: {name!r}")
        if transform_type.requires_param != (param is not None):
            msg = (
                f"Transform {transform_type.value} requires a numeric parameter"
                if transform_type.requires_param
                else f"Transform {transform_type.value} does not take a parameter"
            )
            raise TransformParseError(expression, msg)

        return cls(
            source_column=column,
            transform_type=transform_type,
            param=int(param) if param is not None else None,
        )


class PartitionTransforms(BaseModel):
    """The ordered partition transforms requested for one query.

    Produced by the planning phase and handed to the spec builder through
    a QueryContext. Order determines partition field order.

    Attributes:
        transforms: Transform declarations in partition field order.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    transforms: tuple[PartitionTransform, ...] = Field(
        default=(),
        description="Transform declarations in partition field order",
    )

    def __len__(self) -> int:
        return len(self.transforms)

    @classmethod
    def from_expressions(cls, expressions: Iterable[str]) -> PartitionTransforms:
        """Build from transform expressions such as ``["day(ts)", "region"]``."""
        return cls(transforms=tuple(PartitionTransform.from_expression(e) for e in expressions))


class PartitionEvolutionConfig(BaseModel):
    """Requested partition layout for one table.

    ``partition_by`` entries may be transform expressions or mappings with
    PartitionTransform fields. Leaving ``partition_by`` out means "no
    layout requested" and leaves the table spec untouched; an empty list
    requests an unpartitioned table.

    Attributes:
        table: Target table identifier.
        partition_by: Ordered transform declarations, or None.

    Example:
        >>> config = PartitionEvolutionConfig.from_yaml("partitioning.yaml")
        >>> config.transforms()
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    table: TableIdentifier = Field(
        ...,
        description="Target table identifier",
    )
    partition_by: tuple[PartitionTransform, ...] | None = Field(
        default=None,
        description="Ordered partition transform declarations",
    )

    @field_validator("table", mode="before")
    @classmethod
    def parse_table(cls, v: Any) -> Any:
        """Accept "namespace.table" strings."""
        if isinstance(v, str):
            return TableIdentifier.from_string(v)
        return v

    @field_validator("partition_by", mode="before")
    @classmethod
    def parse_partition_by(cls, v: Any) -> Any:
        """Accept transform expressions alongside mappings."""
        if v is None:
            return v
        return tuple(
            PartitionTransform.from_expression(item) if isinstance(item, str) else item
            for item in v
        )

    def transforms(self) -> PartitionTransforms | None:
        """Return the requested transforms, or None if none were requested."""
        if self.partition_by is None:
            return None
        return PartitionTransforms(transforms=self.partition_by)

    @classmethod
    def from_yaml(cls, path: str | Path) -> PartitionEvolutionConfig:
        """Load and validate a PartitionEvolutionConfig from a YAML file.

        Raises:
            FileNotFoundError: If file doesn't exist.
            yaml.YAMLError: If YAML syntax is invalid.
            ValidationError: If schema validation fails.
            TransformParseError: If a transform expression is malformed.
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"File not found: {path}")

        with path.open("r") as f:
            data: dict[str, Any] = yaml.safe_load(f)

        return cls.model_validate(data)
