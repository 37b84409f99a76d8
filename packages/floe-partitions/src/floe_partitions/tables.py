"""Table resolution for a query.

Tables are loaded through the catalog at most once per QueryContext;
later lookups for the same identifier are served from the context.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from pyiceberg.exceptions import NoSuchTableError as PyIcebergTableNotFoundError

from floe_partitions.config import TableIdentifier
from floe_partitions.errors import TableNotFoundError
from floe_partitions.observability import get_logger, partition_operation

if TYPE_CHECKING:
    from pyiceberg.catalog import Catalog
    from pyiceberg.table import Table
    from structlog.stdlib import BoundLogger

    from floe_partitions.context import QueryContext


def normalize_identifier(identifier: str | TableIdentifier) -> TableIdentifier:
    """Normalize table identifier to TableIdentifier."""
    if isinstance(identifier, TableIdentifier):
        return identifier
    return TableIdentifier.from_string(identifier)


def inner_catalog(catalog: Catalog | Any) -> Catalog:
    """Return the PyIceberg Catalog behind a catalog wrapper.

    Handles wrappers such as PolarisCatalog (which hold a Catalog as
    ``inner_catalog``) and bare PyIceberg catalogs.
    """
    if hasattr(catalog, "inner_catalog"):
        return catalog.inner_catalog
    return catalog  # type: ignore[return-value]


def get_table(
    context: QueryContext,
    catalog: Catalog | Any,
    identifier: str | TableIdentifier,
    *,
    logger: BoundLogger | None = None,
) -> Table:
    """Return the table for identifier, loading it at most once per query.

    Looks for the table in the query context first. On a miss the table is
    loaded through the catalog and stored in the context, so later stages
    of the same query see the same Table object.

    Args:
        context: The current query context.
        catalog: PyIceberg Catalog, or a wrapper exposing ``inner_catalog``.
        identifier: Table identifier (namespace.table or TableIdentifier).
        logger: Optional structlog logger.

    Returns:
        PyIceberg Table object.

    Raises:
        TableNotFoundError: If the catalog has no such table.
    """
    log = logger or get_logger()
    table_id = normalize_identifier(identifier)
    table_str = str(table_id)

    cached = context.get_table(table_id)
    if cached is not None:
        log.debug("table_loaded_from_cache", table=table_str)
        return cached

    with partition_operation("get_table", table=table_str):
        log.debug("table_not_in_query_context", table=table_str)
        try:
            table = inner_catalog(catalog).load_table(table_id.as_tuple())
        except PyIcebergTableNotFoundError as exc:
            raise TableNotFoundError(table_str) from exc
        context.put_table(table_id, table)
        log.debug("table_loaded_from_catalog", table=table_str)
        return table
