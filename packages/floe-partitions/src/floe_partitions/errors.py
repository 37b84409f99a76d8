"""Custom exceptions for floe-partitions.

This module defines the exception hierarchy:
- FloeStorageError (base)
- TableNotFoundError
- PartitionSpecError
- TransformParseError

Failures raised by PyIceberg while validating or committing a partition
spec update are not wrapped; they reach the caller unchanged.
"""

from __future__ import annotations

__all__ = [
    "FloeStorageError",
    "TableNotFoundError",
    "PartitionSpecError",
    "TransformParseError",
]


class FloeStorageError(Exception):
    """Base exception for all floe partition operations.

    Attributes:
        message: Human-readable error description.
        details: Optional additional context about the error.

    Example:
        >>> try:
        ...     build_partition_spec(schema, transforms)
        ... except FloeStorageError as e:
        ...     print(f"Storage error: {e}")
    """

    def __init__(self, message: str, *, details: dict[str, str] | None = None) -> None:
        """Initialize FloeStorageError.

        Args:
            message: Human-readable error description.
            details: Optional additional context about the error.
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """Return string representation with details if present."""
        if self.details:
            detail_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({detail_str})"
        return self.message


class TableNotFoundError(FloeStorageError):
    """Table not found in the catalog.

    Raised when a table is resolved for a query and the catalog does not
    know the identifier.

    Example:
        >>> try:
        ...     get_table(context, catalog, "bronze.nonexistent")
        ... except TableNotFoundError as e:
        ...     print(f"Table not found: {e.table}")
    """

    def __init__(
        self,
        table: str,
        message: str | None = None,
    ) -> None:
        """Initialize TableNotFoundError.

        Args:
            table: The table identifier that was not found.
            message: Optional custom error message.
        """
        msg = message or f"Table not found: {table}"
        super().__init__(msg, details={"table": table})
        self.table = table


class PartitionSpecError(FloeStorageError):
    """A partition spec could not be derived from transform declarations.

    Raised when:
    - A declared source column does not exist in the table schema
    - Two declarations produce the same partition field name
    - A partition field name collides with a different schema column
    - A parameterised transform (BUCKET, TRUNCATE) has no parameter

    Example:
        >>> try:
        ...     build_partition_spec(schema, [PartitionTransform.from_expression("day(missing)")])
        ... except PartitionSpecError as e:
        ...     print(f"Bad partition declaration: {e.source_column}")
    """

    def __init__(
        self,
        message: str = "Invalid partition spec",
        *,
        source_column: str | None = None,
        transform: str | None = None,
    ) -> None:
        """Initialize PartitionSpecError.

        Args:
            message: Human-readable error description.
            source_column: The source column of the offending declaration.
            transform: The transform type of the offending declaration.
        """
        details: dict[str, str] = {}
        if source_column:
            details["source_column"] = source_column
        if transform:
            details["transform"] = transform
        super().__init__(message, details=details)
        self.source_column = source_column
        self.transform = transform


class TransformParseError(PartitionSpecError):
    """A textual partition transform expression could not be parsed.

    Example:
        >>> try:
        ...     PartitionTransform.from_expression("bucket(id)")
        ... except TransformParseError as e:
        ...     print(f"Cannot parse: {e.expression}")
    """

    def __init__(
        self,
        expression: str,
        message: str | None = None,
    ) -> None:
        """Initialize TransformParseError.

        Args:
            expression: The expression that failed to parse.
            message: Optional custom error message.
        """
        msg = message or f"Cannot parse partition transform: {expression!r}"
        super().__init__(msg)
        self.details["expression"] = expression
        self.expression = expression
