"""Catalog query execution (core domain)."""

from __future__ import annotations

import logging
from typing import List

from romscope.core.filters import FilterSpec
from romscope.core.models import CatalogRecord, ResultSet
from romscope.core.ports import CatalogPort

LOGGER = logging.getLogger(__name__)


class CatalogQueryExecutor:
    """Runs a FilterSpec through the catalog port and materializes records."""

    def __init__(self, catalog: CatalogPort) -> None:
        self._catalog = catalog

    def execute(self, spec: FilterSpec) -> ResultSet:
        """Return the ordered, capped result set for ``spec``.

        Rows that cannot be decoded are skipped. QueryError from the catalog
        propagates to the caller; zero rows is a valid empty result.
        """

        records: List[CatalogRecord] = []
        skipped = 0
        for row in self._catalog.query(spec.where, spec.order_by, spec.limit):
            try:
                records.append(CatalogRecord.from_row(row))
            except (TypeError, ValueError) as exc:
                skipped += 1
                LOGGER.debug("Skipping undecodable catalog row: %s", exc)
        if skipped:
            LOGGER.warning("Skipped %s undecodable catalog rows", skipped)

        records.sort(key=CatalogRecord.sort_key)
        records = records[: spec.limit]

        total = len(records)
        if total > spec.max_results:
            # The fetch was capped; only the count query knows the real total.
            total = max(total, self._catalog.count(spec.where))
        return ResultSet(records=tuple(records), total_matches=total)
