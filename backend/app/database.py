"""
In-memory record store.
Holds the three metric tables and the query history for the process lifetime.
"""

import logging
import threading
from typing import Iterable
from app.models import (
    AdSalesMetrics, AdSalesMetricsCreate,
    TotalSalesMetrics, TotalSalesMetricsCreate,
    EligibilityEntry, EligibilityEntryCreate,
    QueryHistory, QueryHistoryCreate,
    DataStatus, Row,
)
from app.services.query_engine import (
    AD_SALES_TABLE, TOTAL_SALES_TABLE, ELIGIBILITY_TABLE, execute_query,
)
from app.utils import utcnow

logger = logging.getLogger(__name__)


class RecordStore:
    """
    Process-wide store. Every id allocation and collection mutation happens
    under one lock, so ids stay unique and increasing across all record types.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._next_id = 1
        self._query_history: dict[int, QueryHistory] = {}
        self._ad_sales: dict[int, AdSalesMetrics] = {}
        self._total_sales: dict[int, TotalSalesMetrics] = {}
        self._eligibility: dict[int, EligibilityEntry] = {}

    def _allocate_id(self) -> int:
        # Caller holds self._lock
        record_id = self._next_id
        self._next_id += 1
        return record_id

    # ── Query History ─────────────────────────────────────────────────

    def create_query_history(self, history: QueryHistoryCreate) -> QueryHistory:
        with self._lock:
            entry = QueryHistory(**history.model_dump(), id=self._allocate_id(), timestamp=utcnow())
            self._query_history[entry.id] = entry
        return entry

    def get_query_history(self, limit: int = 10) -> list[QueryHistory]:
        """Most recent first; id breaks timestamp ties."""
        with self._lock:
            entries = list(self._query_history.values())
        entries.sort(key=lambda e: (e.timestamp, e.id), reverse=True)
        return entries[:max(limit, 0)]

    def clear_query_history(self) -> None:
        with self._lock:
            self._query_history = {}

    # ── Ad Sales Metrics ──────────────────────────────────────────────

    def create_ad_sales_metric(self, metric: AdSalesMetricsCreate) -> AdSalesMetrics:
        with self._lock:
            entry = AdSalesMetrics(**metric.model_dump(), id=self._allocate_id())
            self._ad_sales[entry.id] = entry
        return entry

    def get_ad_sales_metrics(self) -> list[AdSalesMetrics]:
        with self._lock:
            return list(self._ad_sales.values())

    def bulk_insert_ad_sales_metrics(self, metrics: Iterable[AdSalesMetricsCreate]) -> int:
        count = 0
        for m in metrics:
            self.create_ad_sales_metric(m)
            count += 1
        return count

    # ── Total Sales Metrics ───────────────────────────────────────────

    def create_total_sales_metric(self, metric: TotalSalesMetricsCreate) -> TotalSalesMetrics:
        with self._lock:
            entry = TotalSalesMetrics(**metric.model_dump(), id=self._allocate_id())
            self._total_sales[entry.id] = entry
        return entry

    def get_total_sales_metrics(self) -> list[TotalSalesMetrics]:
        with self._lock:
            return list(self._total_sales.values())

    def bulk_insert_total_sales_metrics(self, metrics: Iterable[TotalSalesMetricsCreate]) -> int:
        count = 0
        for m in metrics:
            self.create_total_sales_metric(m)
            count += 1
        return count

    # ── Eligibility Table ─────────────────────────────────────────────

    def create_eligibility_entry(self, entry: EligibilityEntryCreate) -> EligibilityEntry:
        with self._lock:
            record = EligibilityEntry(**entry.model_dump(), id=self._allocate_id())
            self._eligibility[record.id] = record
        return record

    def get_eligibility_table(self) -> list[EligibilityEntry]:
        with self._lock:
            return list(self._eligibility.values())

    def bulk_insert_eligibility_entries(self, entries: Iterable[EligibilityEntryCreate]) -> int:
        count = 0
        for e in entries:
            self.create_eligibility_entry(e)
            count += 1
        return count

    # ── Analytics ─────────────────────────────────────────────────────

    def table_rows(self) -> dict[str, list[Row]]:
        """Snapshot of every queryable table as plain row dicts, in storage order."""
        with self._lock:
            return {
                AD_SALES_TABLE: [r.model_dump() for r in self._ad_sales.values()],
                TOTAL_SALES_TABLE: [r.model_dump() for r in self._total_sales.values()],
                ELIGIBILITY_TABLE: [r.model_dump() for r in self._eligibility.values()],
            }

    def execute_raw_query(self, sql: str) -> list[Row]:
        return execute_query(sql, self.table_rows())

    def get_data_counts(self) -> DataStatus:
        with self._lock:
            return DataStatus(
                ad_sales=len(self._ad_sales),
                total_sales=len(self._total_sales),
                eligibility=len(self._eligibility),
            )


store = RecordStore()


def get_store() -> RecordStore:
    """Dependency that provides the process-wide record store."""
    return store
