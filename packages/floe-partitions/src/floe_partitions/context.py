"""Per-query context for partition spec operations.

A QueryContext is the unit of work for one query: it carries the
partition transforms requested by the planning phase and memoizes the
tables loaded while the query runs. The table cache lives only as long
as the context; leaving the ``with`` block clears it.
"""

from __future__ import annotations

from collections.abc import Iterable
from types import TracebackType
from typing import TYPE_CHECKING

from floe_partitions.config import PartitionTransform, PartitionTransforms, TableIdentifier

if TYPE_CHECKING:
    from pyiceberg.table import Table


class QueryContext:
    """Typed state shared by the stages of one query.

    Attributes:
        partition_transforms: Requested partition transforms, or None if
            the query did not request a partition layout.

    Example:
        >>> transforms = PartitionTransforms.from_expressions(["day(ts)", "region"])
        >>> with QueryContext(transforms) as context:
        ...     table = get_table(context, catalog, "bronze.events")
        ...     update_spec(context, table)
    """

    def __init__(
        self,
        partition_transforms: PartitionTransforms | Iterable[PartitionTransform] | None = None,
    ) -> None:
        """Initialize QueryContext.

        Args:
            partition_transforms: Requested transforms, as PartitionTransforms
                or any ordered iterable of PartitionTransform. None means no
                partition layout was requested.
        """
        if partition_transforms is not None and not isinstance(
            partition_transforms, PartitionTransforms
        ):
            partition_transforms = PartitionTransforms(transforms=tuple(partition_transforms))
        self.partition_transforms: PartitionTransforms | None = partition_transforms
        self._tables: dict[str, Table] = {}

    def get_table(self, identifier: str | TableIdentifier) -> Table | None:
        """Return the table cached under identifier, or None."""
        return self._tables.get(str(identifier))

    def put_table(self, identifier: str | TableIdentifier, table: Table) -> None:
        """Cache a loaded table for the rest of the query."""
        self._tables[str(identifier)] = table

    def close(self) -> None:
        """Drop every cached table."""
        self._tables.clear()

    def __enter__(self) -> QueryContext:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()
