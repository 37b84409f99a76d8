"""floe-partitions: Iceberg partition spec building and evolution.

This package provides:
- Partition transform declarations (identity, year/month/day/hour,
  truncate, bucket) and their textual expression form
- PartitionSpec building from an ordered list of declarations
- Partition spec evolution of existing tables in one atomic update
- A per-query context carrying requested transforms and loaded tables

Example:
    >>> from floe_partitions import PartitionTransforms, QueryContext, evolve_table_spec
    >>>
    >>> transforms = PartitionTransforms.from_expressions(["day(ts)", "bucket(16, id)"])
    >>> with QueryContext(transforms) as context:
    ...     result = evolve_table_spec(context, catalog, "bronze.events")
    >>> result.added
    ('ts_day', 'id_bucket')
"""

from __future__ import annotations

__version__ = "0.1.0"

__all__ = [
    # Spec building and evolution
    "build_partition_spec",
    "requested_spec",
    "update_spec",
    "evolve_table_spec",
    "get_table",
    "SpecUpdateResult",
    # Query context
    "QueryContext",
    # Configuration models
    "TableIdentifier",
    "PartitionTransform",
    "PartitionTransformType",
    "PartitionTransforms",
    "PartitionEvolutionConfig",
    # Logging
    "configure_logging",
    # Exceptions
    "FloeStorageError",
    "TableNotFoundError",
    "PartitionSpecError",
    "TransformParseError",
]


def __getattr__(name: str) -> object:
    """Lazy import of public API members."""
    if name in ("build_partition_spec", "requested_spec"):
        from floe_partitions import partitions as partitions_module

        return getattr(partitions_module, name)
    if name in ("update_spec", "evolve_table_spec", "SpecUpdateResult"):
        from floe_partitions import evolution as evolution_module

        return getattr(evolution_module, name)
    if name == "get_table":
        from floe_partitions.tables import get_table

        return get_table
    if name == "QueryContext":
        from floe_partitions.context import QueryContext

        return QueryContext
    if name == "configure_logging":
        from floe_partitions.observability import configure_logging

        return configure_logging
    if name in (
        "TableIdentifier",
        "PartitionTransform",
        "PartitionTransformType",
        "PartitionTransforms",
        "PartitionEvolutionConfig",
    ):
        from floe_partitions import config as config_module

        return getattr(config_module, name)
    if name in (
        "FloeStorageError",
        "TableNotFoundError",
        "PartitionSpecError",
        "TransformParseError",
    ):
        from floe_partitions import errors as errors_module

        return getattr(errors_module, name)
    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
