"""
AI Service — question → SQL translation, plain-language answers, and dashboard insights.
Talks to the LLM through a CompletionClient (OpenAI or Anthropic by default).
"""

import json
import logging
import re
from typing import Any, Optional, Sequence
from app.exceptions import TranslationError, SummarizationError
from app.services.llm_client import CompletionClient, create_llm_client

logger = logging.getLogger(__name__)

SCHEMA_DESCRIPTION = """1. ad_sales_metrics: product_name, campaign_name, ad_spend, impressions, clicks, cpc, ctr, conversions, conversion_rate, roas
2. total_sales_metrics: product_name, category, total_revenue, units_sold, avg_order_value, profit_margin, customer_acquisition_cost
3. eligibility_table: product_name, eligible_for_ads, category_restrictions, min_order_quantity, max_order_quantity, geographic_restrictions"""

SQL_PROMPT = """You are an expert SQL query generator. Convert the following natural language question into a SQL query.

Available tables and their schemas:
{schema}

Question: "{question}"

Rules:
- Generate only valid SQL SELECT statements
- Use proper table and column names
- Include appropriate WHERE, GROUP BY, ORDER BY clauses as needed
- For aggregations, use SUM, COUNT, AVG as appropriate
- Limit results to reasonable numbers (use LIMIT clause)
- Return only the SQL query, no explanations

SQL Query:"""

SUMMARY_PROMPT = """You are a business analytics expert. Based on the following data and question, provide a clear, concise summary in natural language.

Question: "{question}"
Data: {data}{more}

Provide a business-friendly answer that:
- Directly answers the question
- Highlights key insights
- Uses proper formatting with numbers
- Keeps it concise but informative
- Uses business terminology

Summary:"""

INSIGHTS_PROMPT = """You are a business intelligence analyst. Based on the following e-commerce data, provide 4-5 key business insights.

Ad Sales Data (sample): {ad_sales}
Total Sales Data (sample): {total_sales}
Eligibility Data (sample): {eligibility}

Provide insights as a JSON array of strings, focusing on:
- Revenue performance
- Ad spend efficiency
- Product performance
- Growth opportunities
- Risk factors

Format: ["Insight 1", "Insight 2", "Insight 3", "Insight 4", "Insight 5"]

Insights:"""

SUMMARY_FALLBACK = "Unable to generate summary at this time."
INSIGHTS_FALLBACK = [
    "Unable to generate insights at this time.",
    "Please try again later.",
]

SUMMARY_ROW_LIMIT = 10
INSIGHTS_SAMPLE_SIZE = 5
MAX_INSIGHTS = 5

_JSON_FENCE_RE = re.compile(r"```(?:json)?\s*(.*?)\s*```", re.DOTALL | re.IGNORECASE)


def _to_rows(items: Sequence[Any]) -> list:
    """Records may be pydantic models or plain dicts."""
    return [item.model_dump() if hasattr(item, "model_dump") else item for item in items]


def _parse_insights(text: str) -> list[str]:
    """JSON array of strings if possible, else up to 5 non-empty lines of the raw text."""
    candidate = text
    fenced = _JSON_FENCE_RE.search(text)
    if fenced:
        candidate = fenced.group(1)
    try:
        parsed = json.loads(candidate)
        if isinstance(parsed, list) and all(isinstance(i, str) for i in parsed):
            return parsed
        logger.warning("Insights JSON was not an array of strings; falling back to line split")
    except json.JSONDecodeError:
        logger.warning("Failed to parse insights JSON; falling back to line split")
    return [line.strip() for line in text.splitlines() if line.strip()][:MAX_INSIGHTS]


class AIService:
    """Question-to-SQL and answer generation on top of a completion client."""

    def __init__(self, client: Optional[CompletionClient] = None):
        self._client = client

    @property
    def client(self) -> CompletionClient:
        # Built on first use so a missing API key only fails the request that needs it
        if self._client is None:
            self._client = create_llm_client()
        return self._client

    def build_sql_prompt(self, question: str) -> str:
        return SQL_PROMPT.format(schema=SCHEMA_DESCRIPTION, question=question)

    async def convert_to_sql(self, question: str) -> str:
        """
        Ask the LLM for a SELECT statement answering ``question``.
        Returns the raw completion text; cleaning it up is the sanitizer's job.
        """
        try:
            return (await self.client.complete(self.build_sql_prompt(question))).strip()
        except Exception as e:
            logger.error(f"Error generating SQL: {e}")
            raise TranslationError("Failed to convert question to SQL") from e

    async def _ask(self, prompt: str) -> str:
        try:
            return (await self.client.complete(prompt)).strip()
        except Exception as e:
            raise SummarizationError(str(e) or e.__class__.__name__) from e

    async def generate_summary(self, rows: Sequence[dict], question: str) -> str:
        """Plain-language answer for ``question`` from the result rows. Never raises."""
        more = ""
        if len(rows) > SUMMARY_ROW_LIMIT:
            more = f" ... and {len(rows) - SUMMARY_ROW_LIMIT} more rows"
        prompt = SUMMARY_PROMPT.format(
            question=question,
            data=json.dumps(list(rows[:SUMMARY_ROW_LIMIT]), default=str),
            more=more,
        )
        try:
            return await self._ask(prompt)
        except SummarizationError as e:
            logger.error(f"Error generating summary: {e}")
            return SUMMARY_FALLBACK

    async def generate_insights(
        self,
        ad_sales: Sequence[Any],
        total_sales: Sequence[Any],
        eligibility: Sequence[Any],
    ) -> list[str]:
        """4–5 business insights from a sample of each table. Never raises."""
        prompt = INSIGHTS_PROMPT.format(
            ad_sales=json.dumps(_to_rows(ad_sales[:INSIGHTS_SAMPLE_SIZE]), default=str),
            total_sales=json.dumps(_to_rows(total_sales[:INSIGHTS_SAMPLE_SIZE]), default=str),
            eligibility=json.dumps(_to_rows(eligibility[:INSIGHTS_SAMPLE_SIZE]), default=str),
        )
        try:
            text = await self._ask(prompt)
        except SummarizationError as e:
            logger.error(f"Error generating insights: {e}")
            return list(INSIGHTS_FALLBACK)
        return _parse_insights(text)


def create_ai_service(client: Optional[CompletionClient] = None) -> AIService:
    """Factory function to create an AI service instance."""
    return AIService(client=client)


_default_service: Optional[AIService] = None


def get_ai_service() -> AIService:
    """Dependency that provides the process-wide AI service."""
    global _default_service
    if _default_service is None:
        _default_service = create_ai_service()
    return _default_service
