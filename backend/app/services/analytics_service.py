"""
Analytics Service — dashboard chart payloads and the AI-assisted account summary.
"""

import logging
from app.config import get_settings
from app.database import RecordStore
from app.models import (
    AnalyticsData, ChartSeries, ScatterChart, ScatterPoint, SummaryData,
)
from app.services.ai_service import AIService

logger = logging.getLogger(__name__)
settings = get_settings()

BAR_CHART_SIZE = 10
LINE_CHART_SIZE = 12
PIE_CHART_SIZE = 8
SCATTER_SAMPLE_SIZE = 20


class AnalyticsService:
    def __init__(self, store: RecordStore, ai: AIService):
        self.store = store
        self.ai = ai

    def generate_analytics(self) -> AnalyticsData:
        """Bar/line/pie/scatter payloads. Any failure yields empty charts."""
        try:
            ad_sales = self.store.get_ad_sales_metrics()
            total_sales = self.store.get_total_sales_metrics()

            # Bar: revenue by product, top 10
            by_revenue = sorted(total_sales, key=lambda s: s.total_revenue or 0, reverse=True)[:BAR_CHART_SIZE]
            bar_chart = ChartSeries(
                labels=[s.product_name or "Unknown" for s in by_revenue],
                data=[s.total_revenue or 0 for s in by_revenue],
            )

            # Line: ad spend per product, alphabetical
            by_name = sorted(ad_sales, key=lambda a: a.product_name or "")[:LINE_CHART_SIZE]
            line_chart = ChartSeries(
                labels=[a.product_name or "Unknown" for a in by_name],
                data=[a.ad_spend or 0 for a in by_name],
            )

            # Pie: revenue share per category
            category_revenue: dict[str, float] = {}
            for s in total_sales:
                category = s.category or "Other"
                category_revenue[category] = category_revenue.get(category, 0) + (s.total_revenue or 0)
            pie_items = list(category_revenue.items())[:PIE_CHART_SIZE]
            pie_chart = ChartSeries(
                labels=[c for c, _ in pie_items],
                data=[r for _, r in pie_items],
            )

            # Scatter: ad spend vs revenue, joined on product_name
            revenue_by_product: dict[str, float] = {}
            for s in total_sales:
                revenue_by_product.setdefault(s.product_name, s.total_revenue or 0)
            points = []
            for a in ad_sales[:SCATTER_SAMPLE_SIZE]:
                revenue = revenue_by_product.get(a.product_name)
                if a.ad_spend and revenue:
                    points.append(ScatterPoint(x=a.ad_spend, y=revenue))

            return AnalyticsData(
                bar_chart=bar_chart,
                line_chart=line_chart,
                pie_chart=pie_chart,
                scatter_chart=ScatterChart(data=points),
            )
        except Exception as e:
            logger.error(f"Error generating analytics: {e}", exc_info=True)
            return AnalyticsData()

    async def generate_summary(self) -> SummaryData:
        """Headline numbers plus LLM insights. Any failure yields a placeholder summary."""
        try:
            ad_sales = self.store.get_ad_sales_metrics()
            total_sales = self.store.get_total_sales_metrics()
            eligibility = self.store.get_eligibility_table()

            total_revenue = sum(s.total_revenue or 0 for s in total_sales)
            top = max(total_sales, key=lambda s: s.total_revenue or 0, default=None)
            positive_roas = [a.roas for a in ad_sales if a.roas and a.roas > 0]
            average_roas = sum(positive_roas) / len(positive_roas) if positive_roas else 0

            key_insights = await self.ai.generate_insights(ad_sales, total_sales, eligibility)

            return SummaryData(
                total_revenue=total_revenue,
                top_product=(top.product_name if top else None) or "N/A",
                average_roas=average_roas,
                growth_rate=settings.summary_growth_rate,
                key_insights=key_insights,
            )
        except Exception as e:
            logger.error(f"Error generating summary: {e}", exc_info=True)
            return SummaryData(
                total_revenue=0,
                top_product="N/A",
                average_roas=0,
                growth_rate=0,
                key_insights=["Unable to generate insights at this time."],
            )
