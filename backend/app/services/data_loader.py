"""
Data Loader — fills the record store from CSV exports at startup.

Each table reads its own file from ``settings.data_dir``. Column headers are
matched against a list of accepted spellings (``product_name`` or ``Product``,
``ad_spend`` or ``Ad Spend`` ...). A missing file loads a small built-in
sample instead.
"""

import csv
import logging
from pathlib import Path
from typing import Callable, Optional
from app.config import get_settings
from app.database import RecordStore
from app.models import AdSalesMetricsCreate, TotalSalesMetricsCreate, EligibilityEntryCreate
from app.utils import parse_bool, parse_float, parse_int

logger = logging.getLogger(__name__)
settings = get_settings()

AD_SALES_FILE = "sample_ad_sales.csv"
TOTAL_SALES_FILE = "sample_total_sales.csv"
ELIGIBILITY_FILE = "sample_eligibility.csv"

# field -> accepted CSV headers, first match wins
AD_SALES_HEADERS = {
    "product_name": ("product_name", "Product"),
    "campaign_name": ("campaign_name", "Campaign"),
    "ad_spend": ("ad_spend", "Ad Spend"),
    "impressions": ("impressions", "Impressions"),
    "clicks": ("clicks", "Clicks"),
    "cpc": ("cpc", "CPC"),
    "ctr": ("ctr", "CTR"),
    "conversions": ("conversions", "Conversions"),
    "conversion_rate": ("conversion_rate", "Conversion Rate"),
    "roas": ("roas", "ROAS"),
}

TOTAL_SALES_HEADERS = {
    "product_name": ("product_name", "Product"),
    "category": ("category", "Category"),
    "total_revenue": ("total_revenue", "Total Revenue"),
    "units_sold": ("units_sold", "Units Sold"),
    "avg_order_value": ("avg_order_value", "AOV"),
    "profit_margin": ("profit_margin", "Profit Margin"),
    "customer_acquisition_cost": ("customer_acquisition_cost", "CAC"),
}

ELIGIBILITY_HEADERS = {
    "product_name": ("product_name", "Product"),
    "eligible_for_ads": ("eligible_for_ads", "Eligible for Ads"),
    "category_restrictions": ("category_restrictions", "Category Restrictions"),
    "min_order_quantity": ("min_order_quantity", "Min Order Qty"),
    "max_order_quantity": ("max_order_quantity", "Max Order Qty"),
    "geographic_restrictions": ("geographic_restrictions", "Geographic Restrictions"),
}


# ── Built-in samples (used when a CSV file is absent) ─────────────────

SAMPLE_AD_SALES = [
    AdSalesMetricsCreate(
        product_name="Wireless Headphones Pro", campaign_name="Summer Sale 2024",
        ad_spend=15000, impressions=150000, clicks=4500, cpc=3.33, ctr=3.0,
        conversions=450, conversion_rate=10.0, roas=5.2,
    ),
    AdSalesMetricsCreate(
        product_name="Smart Watch Series X", campaign_name="Tech Launch Campaign",
        ad_spend=22000, impressions=200000, clicks=6000, cpc=3.67, ctr=3.0,
        conversions=600, conversion_rate=10.0, roas=4.8,
    ),
    AdSalesMetricsCreate(
        product_name="Gaming Laptop Ultra", campaign_name="Gaming Week Promo",
        ad_spend=35000, impressions=120000, clicks=3600, cpc=9.72, ctr=3.0,
        conversions=180, conversion_rate=5.0, roas=6.2,
    ),
]

SAMPLE_TOTAL_SALES = [
    TotalSalesMetricsCreate(
        product_name="Wireless Headphones Pro", category="Electronics",
        total_revenue=750000, units_sold=2500, avg_order_value=300,
        profit_margin=25.5, customer_acquisition_cost=45,
    ),
    TotalSalesMetricsCreate(
        product_name="Smart Watch Series X", category="Wearables",
        total_revenue=920000, units_sold=2300, avg_order_value=400,
        profit_margin=30.2, customer_acquisition_cost=52,
    ),
    TotalSalesMetricsCreate(
        product_name="Gaming Laptop Ultra", category="Computers",
        total_revenue=1200000, units_sold=800, avg_order_value=1500,
        profit_margin=22.8, customer_acquisition_cost=180,
    ),
]

SAMPLE_ELIGIBILITY = [
    EligibilityEntryCreate(
        product_name="Wireless Headphones Pro", eligible_for_ads=True,
        min_order_quantity=1, max_order_quantity=500,
    ),
    EligibilityEntryCreate(
        product_name="Smart Watch Series X", eligible_for_ads=True,
        min_order_quantity=1, max_order_quantity=300,
        geographic_restrictions="US, CA, EU",
    ),
    EligibilityEntryCreate(
        product_name="Gaming Laptop Ultra", eligible_for_ads=True,
        category_restrictions="Age 18+",
        min_order_quantity=1, max_order_quantity=100,
    ),
]


def _pick(record: dict, headers: tuple[str, ...]) -> Optional[str]:
    """First non-blank value among the accepted headers."""
    for header in headers:
        value = record.get(header)
        if value is not None and str(value).strip() != "":
            return str(value).strip()
    return None


def parse_ad_sales_row(record: dict) -> AdSalesMetricsCreate:
    h = AD_SALES_HEADERS
    return AdSalesMetricsCreate(
        product_name=_pick(record, h["product_name"]) or "",
        campaign_name=_pick(record, h["campaign_name"]) or "",
        ad_spend=parse_float(_pick(record, h["ad_spend"])),
        impressions=parse_int(_pick(record, h["impressions"])),
        clicks=parse_int(_pick(record, h["clicks"])),
        cpc=parse_float(_pick(record, h["cpc"])),
        ctr=parse_float(_pick(record, h["ctr"])),
        conversions=parse_int(_pick(record, h["conversions"])),
        conversion_rate=parse_float(_pick(record, h["conversion_rate"])),
        roas=parse_float(_pick(record, h["roas"])),
    )


def parse_total_sales_row(record: dict) -> TotalSalesMetricsCreate:
    h = TOTAL_SALES_HEADERS
    return TotalSalesMetricsCreate(
        product_name=_pick(record, h["product_name"]) or "",
        category=_pick(record, h["category"]) or "",
        total_revenue=parse_float(_pick(record, h["total_revenue"])),
        units_sold=parse_int(_pick(record, h["units_sold"])),
        avg_order_value=parse_float(_pick(record, h["avg_order_value"])),
        profit_margin=parse_float(_pick(record, h["profit_margin"])),
        customer_acquisition_cost=parse_float(_pick(record, h["customer_acquisition_cost"])),
    )


def parse_eligibility_row(record: dict) -> EligibilityEntryCreate:
    h = ELIGIBILITY_HEADERS
    return EligibilityEntryCreate(
        product_name=_pick(record, h["product_name"]) or "",
        eligible_for_ads=parse_bool(_pick(record, h["eligible_for_ads"])),
        category_restrictions=_pick(record, h["category_restrictions"]),
        min_order_quantity=parse_int(_pick(record, h["min_order_quantity"]), default=1),
        max_order_quantity=parse_int(_pick(record, h["max_order_quantity"]), default=1000),
        geographic_restrictions=_pick(record, h["geographic_restrictions"]),
    )


def read_csv_records(path: Path) -> list[dict]:
    """Rows of a headered CSV file as dicts; blank lines skipped."""
    with path.open(newline="", encoding="utf-8-sig") as f:
        return [row for row in csv.DictReader(f) if any(isinstance(v, str) and v.strip() for v in row.values())]


class DataLoader:
    def __init__(self, store: RecordStore, data_dir: Optional[str | Path] = None):
        self.store = store
        self.data_dir = Path(data_dir if data_dir is not None else settings.data_dir)

    def load_all_data(self) -> None:
        """Load every table; one table failing does not stop the others."""
        for name, loader in (
            ("ad sales", self.load_ad_sales_data),
            ("total sales", self.load_total_sales_data),
            ("eligibility", self.load_eligibility_data),
        ):
            try:
                loader()
            except Exception as e:
                logger.error(f"Error loading {name} data: {e}", exc_info=True)
        logger.info(f"Data load finished: {self.store.get_data_counts().model_dump(by_alias=True)}")

    def _load(
        self,
        filename: str,
        label: str,
        parse_row: Callable[[dict], object],
        bulk_insert: Callable[[list], int],
        sample: list,
    ) -> int:
        path = self.data_dir / filename
        if not path.is_file():
            logger.warning(f"{label.capitalize()} data file not found at {path}, using sample data")
            count = bulk_insert(sample)
            logger.info(f"Created {count} sample {label} records")
            return count

        records = [parse_row(r) for r in read_csv_records(path)]
        count = bulk_insert(records)
        logger.info(f"Loaded {count} {label} records from {path}")
        return count

    def load_ad_sales_data(self) -> int:
        return self._load(
            AD_SALES_FILE, "ad sales", parse_ad_sales_row,
            self.store.bulk_insert_ad_sales_metrics, SAMPLE_AD_SALES,
        )

    def load_total_sales_data(self) -> int:
        return self._load(
            TOTAL_SALES_FILE, "total sales", parse_total_sales_row,
            self.store.bulk_insert_total_sales_metrics, SAMPLE_TOTAL_SALES,
        )

    def load_eligibility_data(self) -> int:
        return self._load(
            ELIGIBILITY_FILE, "eligibility", parse_eligibility_row,
            self.store.bulk_insert_eligibility_entries, SAMPLE_ELIGIBILITY,
        )
