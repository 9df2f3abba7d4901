"""
Mini Query Engine — runs a sanitized SQL string against in-memory tables.

This is NOT a SQL parser. The statement is inspected with substring and regex
checks only:

1. the first known table name found (fixed scan order) picks the table,
2. SUM(col) → one row with the column total (also exposed as ``total``),
3. COUNT( → one row with the table's row count,
4. ORDER BY col ... DESC → top 10 rows by that column,
5. anything else → first 100 rows in storage order.

WHERE, JOIN, GROUP BY and additional aggregates are ignored on purpose.
Malformed SQL never raises; the worst case is an empty or unfiltered result.
"""

import logging
import re
from typing import Mapping, Optional, Sequence
from app.models import Row
from app.utils import numeric_or_zero

logger = logging.getLogger(__name__)

AD_SALES_TABLE = "ad_sales_metrics"
TOTAL_SALES_TABLE = "total_sales_metrics"
ELIGIBILITY_TABLE = "eligibility_table"

# Dispatch order matters: the first token present in the SQL wins
TABLE_SCAN_ORDER = (AD_SALES_TABLE, TOTAL_SALES_TABLE, ELIGIBILITY_TABLE)

DEFAULT_SUM_FIELD = "total_revenue"
DEFAULT_ORDER_FIELD = "id"
ORDER_BY_LIMIT = 10
DEFAULT_ROW_LIMIT = 100

_SUM_RE = re.compile(r"sum\((\w+)\)", re.IGNORECASE)
_ORDER_BY_RE = re.compile(r"order by (\w+)", re.IGNORECASE)


def resolve_table(sql: str) -> Optional[str]:
    """First known table name contained in ``sql`` (case-insensitive), else None."""
    lower_sql = sql.lower()
    for table in TABLE_SCAN_ORDER:
        if table in lower_sql:
            return table
    return None


def count_tables(sql: str) -> int:
    """How many of the known table names appear anywhere in ``sql``."""
    lower_sql = sql.lower()
    return sum(1 for table in TABLE_SCAN_ORDER if table in lower_sql)


def extract_sum_field(sql: str) -> str:
    match = _SUM_RE.search(sql)
    return match.group(1) if match else DEFAULT_SUM_FIELD


def extract_order_field(sql: str) -> str:
    match = _ORDER_BY_RE.search(sql)
    return match.group(1) if match else DEFAULT_ORDER_FIELD


def process_query(rows: Sequence[Row], sql: str) -> list[Row]:
    """Apply the sum / count / order-desc / default policy to one table's rows."""
    lower_sql = sql.lower()

    if "sum(" in lower_sql:
        field = extract_sum_field(sql)
        total = sum(numeric_or_zero(row.get(field)) for row in rows)
        return [{field: total, "total": total}]

    if "count(" in lower_sql:
        return [{"count": len(rows)}]

    if "order by" in lower_sql and "desc" in lower_sql:
        field = extract_order_field(sql)
        ordered = sorted(rows, key=lambda row: numeric_or_zero(row.get(field)), reverse=True)
        return [dict(row) for row in ordered[:ORDER_BY_LIMIT]]

    return [dict(row) for row in rows[:DEFAULT_ROW_LIMIT]]


def execute_query(sql: str, tables: Mapping[str, Sequence[Row]]) -> list[Row]:
    """
    Run ``sql`` against ``tables`` (table name → rows in storage order).
    Unknown tables yield an empty result. An empty table still aggregates:
    SUM gives a zero total and COUNT gives zero.
    """
    table = resolve_table(sql or "")
    if table is None:
        logger.info("No known table referenced in SQL; returning empty result")
        return []
    return process_query(tables.get(table) or [], sql)
