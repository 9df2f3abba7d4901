"""
Shared fixtures: a fresh record store and a canned completion client,
so no test ever talks to a real language model.
"""

import pytest
from app.database import RecordStore
from app.models import AdSalesMetricsCreate, TotalSalesMetricsCreate, EligibilityEntryCreate
from app.services.ai_service import AIService


class StubCompletionClient:
    """Returns queued replies in order (the last one repeats); records every prompt."""

    def __init__(self, *replies, error: Exception | None = None):
        self.replies = list(replies) or [""]
        self.error = error
        self.prompts: list[str] = []

    async def complete(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        if len(self.replies) > 1:
            return self.replies.pop(0)
        return self.replies[0]


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def store():
    return RecordStore()


@pytest.fixture
def seeded_store(store):
    store.bulk_insert_ad_sales_metrics([
        AdSalesMetricsCreate(product_name="Headphones", campaign_name="Summer", ad_spend=150, roas=5.0),
        AdSalesMetricsCreate(product_name="Watch", campaign_name="Launch", ad_spend=220, roas=4.0),
    ])
    store.bulk_insert_total_sales_metrics([
        TotalSalesMetricsCreate(product_name="Headphones", category="Electronics", total_revenue=100),
        TotalSalesMetricsCreate(product_name="Watch", category="Wearables", total_revenue=200),
    ])
    store.bulk_insert_eligibility_entries([
        EligibilityEntryCreate(product_name="Headphones", eligible_for_ads=True),
    ])
    return store


@pytest.fixture
def make_ai():
    """Build an AIService around a StubCompletionClient; returns (service, client)."""
    def _make(*replies, error: Exception | None = None):
        client = StubCompletionClient(*replies, error=error)
        return AIService(client=client), client
    return _make
