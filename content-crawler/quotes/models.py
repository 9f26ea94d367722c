from dataclasses import dataclass, fields
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class QuoteRecord:
    """
    One crawl attempt of a quote page.

    INVARIANT: collected_at is always set. A failed attempt carries only the error
    (and the stock code when the URL names one); every quote field stays None.
    """
    source_url: str
    collected_at: datetime
    status_code: Optional[int] = None
    error_message: Optional[str] = None

    # Identity
    stock_code: Optional[str] = None
    stock_name: Optional[str] = None

    # Peer comparison table
    current_price: Optional[int] = None
    change_price: Optional[str] = None
    change_rate: Optional[str] = None
    sales_revenue: Optional[int] = None
    oper_profit: Optional[int] = None
    adjusted_oper_profit: Optional[int] = None
    oper_profit_growth_rate: Optional[str] = None
    net_income: Optional[int] = None
    earning_per_share: Optional[str] = None
    roe: Optional[str] = None

    # Detail section
    market_cap: Optional[str] = None
    market_cap_rank: Optional[str] = None
    listed_shares_count: Optional[int] = None
    par_value: Optional[int] = None
    trading_unit: Optional[int] = None
    investment_opinion: Optional[str] = None
    target_price: Optional[int] = None
    fifty_two_week_high: Optional[int] = None
    fifty_two_week_low: Optional[int] = None
    current_per: Optional[str] = None
    current_eps: Optional[int] = None
    estimated_per: Optional[str] = None
    estimated_eps: Optional[int] = None
    pbr: Optional[str] = None
    bps: Optional[int] = None
    dividend_yield: Optional[str] = None
    foreign_limit_shares: Optional[int] = None
    foreign_held_shares: Optional[int] = None
    foreign_exhaustion_rate: Optional[str] = None
    industry_per: Optional[str] = None
    industry_change_rate: Optional[str] = None

    # Price summary
    previous_close: Optional[int] = None
    opening_price: Optional[int] = None
    high_price: Optional[int] = None
    low_price: Optional[int] = None
    upper_limit_price: Optional[int] = None
    lower_limit_price: Optional[int] = None
    volume: Optional[int] = None
    trading_value: Optional[int] = None

    id: Optional[int] = None

    @classmethod
    def column_names(cls):
        """Persisted columns in declaration order (everything except id)."""
        return [f.name for f in fields(cls) if f.name != "id"]

    @classmethod
    def failure(cls, source_url, error_message, stock_code=None):
        return cls(
            source_url=source_url,
            collected_at=datetime.now(),
            error_message=error_message,
            stock_code=stock_code,
        )
