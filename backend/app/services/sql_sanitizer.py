"""
Reduce a free-text LLM completion to a single-line SQL statement.

The result is best-effort and not guaranteed to be valid SQL; the query
engine downstream treats it defensively.
"""

import re

_FENCE_RE = re.compile(r"```(?:sql)?", re.IGNORECASE)

SQL_LINE_PREFIXES = (
    "select",
    "from",
    "where",
    "group by",
    "order by",
    "limit",
    "and",
    "or",
)


def _is_sql_line(line: str) -> bool:
    trimmed = line.strip().lower()
    if trimmed.startswith(SQL_LINE_PREFIXES):
        return True
    return "select" in trimmed and "from" in trimmed


def clean_sql_response(text: str) -> str:
    """
    Strip Markdown fences, drop commentary lines, join the SQL-looking lines.

    >>> clean_sql_response("```sql\\nSELECT *\\nFROM ad_sales_metrics\\n```")
    'SELECT * FROM ad_sales_metrics'

    Returns "" when no line looks like SQL.
    """
    if not text:
        return ""
    cleaned = _FENCE_RE.sub("", text)
    lines = [line.strip() for line in cleaned.splitlines() if line.strip()]
    return " ".join(line for line in lines if _is_sql_line(line))
