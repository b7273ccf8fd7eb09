"""
Dashboard KPIs and chart series computed from sales, purchase, customer and
supplier records.
"""
import logging
import math
from typing import Any, Dict, List, Optional

import pandas as pd

from bizsheets.services.sheets import SheetsClient
from bizsheets.services.sheets.records import Record
from bizsheets.utils import to_number

logger = logging.getLogger(__name__)

UNKNOWN = "Unknown"
NOT_AVAILABLE = "N/A"

SALES_AMOUNT = 'Total Sales Price'
PURCHASE_AMOUNT = 'Total Purchase Price'


def format_currency(value: float) -> str:
    """Format as whole dollars with separators, keeping up to two decimals ($1,234.5)."""
    rounded = round(float(value), 2)
    sign = "-" if rounded < 0 else ""
    text = f"{abs(rounded):,.2f}".rstrip("0").rstrip(".")
    return f"{sign}${text}"


def format_compact(value: float) -> str:
    """Format as a short compact number (950, 1.2K, 113K, 4.5M)."""
    value = float(value)
    suffixes = ["", "K", "M", "B", "T"]
    magnitude = 0
    scaled = value
    while abs(scaled) >= 1000 and magnitude < len(suffixes) - 1:
        scaled /= 1000.0
        magnitude += 1

    if abs(scaled) >= 100 or scaled == 0:
        rounded = float(round(scaled))
    else:
        # two significant digits below 100
        digits = 1 - int(math.floor(math.log10(abs(scaled))))
        rounded = round(scaled, digits)

    if abs(rounded) >= 1000 and magnitude < len(suffixes) - 1:
        rounded /= 1000.0
        magnitude += 1

    text = f"{rounded:.2f}".rstrip("0").rstrip(".")
    return f"{text}{suffixes[magnitude]}"


def _frame(records: List[Record], columns: List[str]) -> pd.DataFrame:
    df = pd.DataFrame(records)
    for column in columns:
        if column not in df.columns:
            df[column] = None
    return df


def _amounts(df: pd.DataFrame, column: str) -> pd.Series:
    return df[column].map(to_number).astype(float)


def _group_labels(df: pd.DataFrame, column: str) -> pd.Series:
    return df[column].map(lambda v: UNKNOWN if v is None or v == "" or pd.isna(v) else v)


def _sum_by(df: pd.DataFrame, key: str, amount: str) -> Dict[str, float]:
    """Sum ``amount`` per ``key`` keeping first-seen key order."""
    if df.empty:
        return {}
    grouped = pd.DataFrame({
        "key": _group_labels(df, key),
        "amount": _amounts(df, amount),
    }).groupby("key", sort=False)["amount"].sum()
    return {str(k): float(v) for k, v in grouped.items()}


def _top_key(totals: Dict[str, float]) -> str:
    if not totals:
        return NOT_AVAILABLE
    # max() keeps the first key on ties
    return max(totals, key=lambda k: totals[k])


def _parse_dates(series: pd.Series) -> pd.Series:
    return pd.to_datetime(series, errors="coerce", format="mixed")


def build_dashboard(
    sales: List[Record],
    purchases: List[Record],
    customers: List[Record],
    suppliers: List[Record],
    top_customers: int = 10
) -> Dict[str, Any]:
    """
    Aggregate the four record collections into KPIs and chart series.

    Returns:
        {"kpis": {...}, "charts": {...}} with raw numbers next to the
        formatted KPI strings
    """
    sales_df = _frame(sales, [SALES_AMOUNT, 'City', 'Item Category', 'SO Date', 'Customer Name'])
    purchases_df = _frame(purchases, [PURCHASE_AMOUNT, 'State', 'Item Category', 'Date'])
    customers_df = _frame(customers, ['Balance Receivable'])
    suppliers_df = _frame(suppliers, ['Balance Payable'])

    total_sales = float(_amounts(sales_df, SALES_AMOUNT).sum()) if not sales_df.empty else 0.0
    total_purchases = float(_amounts(purchases_df, PURCHASE_AMOUNT).sum()) if not purchases_df.empty else 0.0
    total_receivable = float(_amounts(customers_df, 'Balance Receivable').sum()) if not customers_df.empty else 0.0
    total_payable = float(_amounts(suppliers_df, 'Balance Payable').sum()) if not suppliers_df.empty else 0.0
    net_profit = total_sales - total_purchases

    sales_by_city = _sum_by(sales_df, 'City', SALES_AMOUNT)
    sales_by_category = _sum_by(sales_df, 'Item Category', SALES_AMOUNT)

    # Monthly sales trend, keyed on the first of each month
    trend: Dict[str, float] = {}
    if not sales_df.empty:
        dated = pd.DataFrame({
            "date": _parse_dates(sales_df['SO Date']),
            "amount": _amounts(sales_df, SALES_AMOUNT),
        }).dropna(subset=["date"])
        if not dated.empty:
            dated["month"] = dated["date"].dt.strftime("%Y-%m-01")
            trend = {k: float(v) for k, v in dated.groupby("month")["amount"].sum().sort_index().items()}

    customer_totals = _sum_by(sales_df, 'Customer Name', SALES_AMOUNT)
    top_customer_items = sorted(customer_totals.items(), key=lambda kv: kv[1], reverse=True)[:top_customers]

    purchases_by_state = _sum_by(purchases_df, 'State', PURCHASE_AMOUNT)

    # Purchases per category per year, categories in first-seen order
    categories: List[str] = []
    years: List[str] = []
    by_year: Dict[str, Dict[str, float]] = {}
    if not purchases_df.empty:
        categories = list(dict.fromkeys(_group_labels(purchases_df, 'Item Category')))
        dated = pd.DataFrame({
            "date": _parse_dates(purchases_df['Date']),
            "category": _group_labels(purchases_df, 'Item Category'),
            "amount": _amounts(purchases_df, PURCHASE_AMOUNT),
        }).dropna(subset=["date"])
        if not dated.empty:
            dated["year"] = dated["date"].dt.year.astype(int).astype(str)
            for (year, category), amount in dated.groupby(["year", "category"], sort=False)["amount"].sum().items():
                by_year.setdefault(year, {})[category] = float(amount)
            years = sorted(by_year)

    purchase_by_category = [
        {"name": category, "data": [by_year[year].get(category, 0.0) for year in years]}
        for category in categories
    ]

    logger.info(
        f"Built dashboard from {len(sales)} sales, {len(purchases)} purchases, "
        f"{len(customers)} customers, {len(suppliers)} suppliers"
    )

    return {
        "kpis": {
            "totalSales": format_currency(total_sales),
            "totalPurchases": format_currency(total_purchases),
            "netProfit": format_currency(net_profit),
            "netProfitRaw": net_profit,
            "totalReceivable": format_currency(total_receivable),
            "totalPayable": format_currency(total_payable),
            "topLocation": _top_key(sales_by_city),
            "topItem": _top_key(sales_by_category),
        },
        "charts": {
            "salesTrend": {
                "categories": list(trend.keys()),
                "values": list(trend.values()),
            },
            "topCustomers": {
                "categories": [name for name, _ in top_customer_items],
                "values": [total for _, total in top_customer_items],
                "labels": [format_compact(total) for _, total in top_customer_items],
            },
            "purchaseByLocation": {
                "labels": list(purchases_by_state.keys()),
                "values": list(purchases_by_state.values()),
            },
            "purchaseByCategory": {
                "categories": years,
                "series": purchase_by_category,
            },
            "salesByCategory": {
                "labels": list(sales_by_category.keys()),
                "values": list(sales_by_category.values()),
            },
            "salesByCity": [{"x": city, "y": total} for city, total in sales_by_city.items()],
        },
    }


class DashboardQuery:
    """Loads the dashboard ranges concurrently and aggregates them."""

    def __init__(
        self,
        client: SheetsClient,
        sales_range: str = "RANGESD",
        purchases_range: str = "RANGEPD",
        customers_range: str = "RANGECUSTOMERS",
        suppliers_range: str = "RANGESUPPLIERS",
        top_customers: int = 10
    ):
        self.client = client
        self.ranges = [sales_range, purchases_range, customers_range, suppliers_range]
        self.top_customers = top_customers

    def run(self, token: Optional[str] = None) -> Dict[str, Any]:
        # All four reads succeed or the whole dashboard fails
        sales, purchases, customers, suppliers = self.client.get_ranges(self.ranges, token=token)
        return build_dashboard(sales, purchases, customers, suppliers, top_customers=self.top_customers)
