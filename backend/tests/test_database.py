"""
Tests for the in-memory record store.
"""

import threading
import pydantic
import pytest
from datetime import timedelta
from app.database import RecordStore
from app.models import AdSalesMetricsCreate, QueryHistoryCreate, TotalSalesMetricsCreate


def _history(n: int) -> QueryHistoryCreate:
    return QueryHistoryCreate(question=f"question {n}", sql=f"SELECT {n}", result="[]")


def test_ids_are_shared_and_increasing_across_tables(store):
    a = store.create_ad_sales_metric(AdSalesMetricsCreate(product_name="A"))
    t = store.create_total_sales_metric(TotalSalesMetricsCreate(product_name="A"))
    h = store.create_query_history(_history(1))
    assert (a.id, t.id, h.id) == (1, 2, 3)


def test_record_defaults(store):
    record = store.create_ad_sales_metric(AdSalesMetricsCreate(product_name="A"))
    assert record.ad_spend == 0
    assert record.roas == 0
    assert record.campaign_name is None


def test_history_most_recent_first_with_limit(store):
    for n in range(5):
        store.create_query_history(_history(n))
    entries = store.get_query_history(3)
    assert [e.question for e in entries] == ["question 4", "question 3", "question 2"]
    keys = [(e.timestamp, e.id) for e in entries]
    assert keys == sorted(keys, reverse=True)
    assert len(set(keys)) == len(keys)


def test_history_limit_larger_than_count(store):
    store.create_query_history(_history(1))
    assert len(store.get_query_history(10)) == 1


def test_clear_history_does_not_reuse_ids(store):
    first = store.create_query_history(_history(1))
    second = store.create_query_history(_history(2))
    store.clear_query_history()
    assert store.get_query_history(10) == []
    third = store.create_query_history(_history(3))
    assert third.id > second.id > first.id


def test_clear_history_leaves_metric_tables(seeded_store):
    seeded_store.create_query_history(_history(1))
    seeded_store.clear_query_history()
    counts = seeded_store.get_data_counts()
    assert (counts.ad_sales, counts.total_sales, counts.eligibility) == (2, 2, 1)


def test_history_entries_are_immutable(store):
    entry = store.create_query_history(_history(1))
    with pytest.raises(pydantic.ValidationError):
        entry.question = "changed"
    assert store.get_query_history(1)[0].question == "question 1"


def test_history_timestamp_is_recent(store):
    entry = store.create_query_history(_history(1))
    other = store.create_query_history(_history(2))
    assert other.timestamp - entry.timestamp < timedelta(seconds=5)


def test_concurrent_history_appends_get_unique_ids():
    store = RecordStore()

    def worker(offset):
        for n in range(50):
            store.create_query_history(_history(offset + n))

    threads = [threading.Thread(target=worker, args=(i * 100,)) for i in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    entries = store.get_query_history(1000)
    assert len(entries) == 400
    assert len({e.id for e in entries}) == 400


def test_execute_raw_query_against_store(seeded_store):
    rows = seeded_store.execute_raw_query("SELECT SUM(total_revenue) FROM total_sales_metrics")
    assert rows == [{"total_revenue": 300, "total": 300}]
    rows = seeded_store.execute_raw_query("SELECT * FROM ad_sales_metrics")
    assert [r["product_name"] for r in rows] == ["Headphones", "Watch"]
    assert rows[0]["id"] == 1


def test_data_counts_serialize_camel_case(seeded_store):
    assert seeded_store.get_data_counts().model_dump(by_alias=True) == {
        "adSales": 2, "totalSales": 2, "eligibility": 1,
    }
