"""Partition spec evolution for existing Iceberg tables.

update_spec() brings a table's current partition spec in line with the
spec requested by the query. Fields are matched by name only: a field
whose name appears in both specs is kept as it is, even when the
requested transform or parameter differs. Changing the transform of an
existing field therefore requires a new field name (or dropping the
field in one query and adding it in the next).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field

from floe_partitions.config import TableIdentifier
from floe_partitions.observability import get_logger, partition_operation
from floe_partitions.partitions import (
    partition_field_name,
    requested_spec,
    to_iceberg_transform,
)
from floe_partitions.tables import get_table

if TYPE_CHECKING:
    from pyiceberg.catalog import Catalog
    from pyiceberg.table import Table
    from structlog.stdlib import BoundLogger

    from floe_partitions.context import QueryContext


class SpecUpdateResult(BaseModel):
    """Outcome of one partition spec reconciliation.

    Attributes:
        table: Table identifier, if known.
        removed: Current field names dropped from the spec.
        added: Requested field names added to the spec.
        retained: Field names present in both specs and left untouched.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    table: str | None = Field(default=None, description="Table identifier")
    removed: tuple[str, ...] = Field(default=(), description="Removed partition fields")
    added: tuple[str, ...] = Field(default=(), description="Added partition fields")
    retained: tuple[str, ...] = Field(default=(), description="Untouched partition fields")

    @property
    def changed(self) -> bool:
        """Return True if any field was removed or added."""
        return bool(self.removed or self.added)


def update_spec(
    context: QueryContext,
    table: Table,
    *,
    table_name: str | None = None,
    logger: BoundLogger | None = None,
) -> SpecUpdateResult | None:
    """Evolve the table's partition spec to the spec requested by the query.

    Removes current fields whose names are not requested, then adds the
    requested fields the table does not have yet, and commits both in a
    single spec update. If the query requested no partition layout the
    table is left alone and no update is opened.

    Errors raised while validating or committing the update are not
    caught; the update is committed as a whole or not at all.

    Args:
        context: The current query context.
        table: PyIceberg Table to evolve.
        table_name: Table identifier used in logs and spans.
        logger: Optional structlog logger.

    Returns:
        SpecUpdateResult describing the change, or None if no partition
        layout was requested.

    Example:
        >>> context = QueryContext(PartitionTransforms.from_expressions(["day(ts)"]))
        >>> result = update_spec(context, table)
        >>> result.added
        ('ts_day',)
    """
    log = logger or get_logger()

    target = requested_spec(context, table.schema(), logger=log)
    if target is None or context.partition_transforms is None:
        log.debug("partition_spec_not_updated", table=table_name, reason="no_spec_requested")
        return None

    current_names = [field.name for field in table.spec().fields]
    target_names = [field.name for field in target.fields]
    retained_names = [name for name in current_names if name in target_names]
    removed_names = [name for name in current_names if name not in retained_names]

    with partition_operation(
        "update_spec",
        table=table_name,
        num_transforms=len(target_names),
    ):
        update = table.update_spec()
        for name in removed_names:
            update.remove_field(name)
        # Validate the removals against the current spec before adding fields
        update._apply()

        added_names: list[str] = []
        for field, transform in zip(target.fields, context.partition_transforms.transforms):
            if field.name in retained_names:
                continue
            update.add_field(
                source_column_name=transform.source_column,
                transform=to_iceberg_transform(transform),
                partition_field_name=partition_field_name(transform),
            )
            added_names.append(field.name)

        update.commit()

    result = SpecUpdateResult(
        table=table_name,
        removed=tuple(removed_names),
        added=tuple(added_names),
        retained=tuple(retained_names),
    )
    log.info(
        "partition_spec_updated",
        table=table_name,
        removed=list(result.removed),
        added=list(result.added),
        retained=list(result.retained),
    )
    return result


def evolve_table_spec(
    context: QueryContext,
    catalog: Catalog | Any,
    identifier: str | TableIdentifier,
    *,
    logger: BoundLogger | None = None,
) -> SpecUpdateResult | None:
    """Resolve a table through the query context and evolve its partition spec.

    Args:
        context: The current query context.
        catalog: PyIceberg Catalog, or a wrapper exposing ``inner_catalog``.
        identifier: Table identifier (namespace.table or TableIdentifier).
        logger: Optional structlog logger.

    Returns:
        SpecUpdateResult, or None if no partition layout was requested.

    Raises:
        TableNotFoundError: If the catalog has no such table.
    """
    table = get_table(context, catalog, identifier, logger=logger)
    return update_spec(context, table, table_name=str(identifier), logger=logger)
