"""
FILE DESCRIPTION: Field-rule tables for the stock quote page.
KEY FUNCTIONS/CLASSES: COMPARATIVE_ROWS, DETAIL_TABLES, PRICE_SUMMARY, FIELD_TYPES, to_typed_fields

Labels are the Korean row headers as rendered on the page. Detail labels are
compared with all whitespace removed and matched by prefix, so more specific
labels must be listed before the shorter labels they start with.
"""

from collections import namedtuple
from extraction.normalizer import clean_text, parse_int, parse_long

# --- Comparative (peer) table: first instrument column only ---

COMPARATIVE_TABLE = "table.tb_type1.tb_num[summary*='동종업종 비교']"

# transform: "text" = cell text, "arrow" = em text with direction word -> arrow,
# "strip_direction" = em text with the direction word removed
COMPARATIVE_ROWS = {
    "현재가": ("current_price", "text"),
    "전일대비": ("change_price", "arrow"),
    "등락률": ("change_rate", "strip_direction"),
    "매출액(억)": ("sales_revenue", "text"),
    "영업이익(억)": ("oper_profit", "text"),
    "조정영업이익(억)": ("adjusted_oper_profit", "text"),
    "영업이익증가율(%)": ("oper_profit_growth_rate", "text"),
    "당기순이익(억)": ("net_income", "text"),
    "주당순이익(원)": ("earning_per_share", "text"),
    "ROE(%)": ("roe", "text"),
}

# Present on the page but collected from the detail section instead.
COMPARATIVE_DEFERRED = frozenset({"시가총액(억)", "외국인비율(%)", "PER(%)", "PBR(배)"})

DIRECTION_ARROWS = {"하향": "▼", "상향": "▲"}

# --- Detail section (div#tab_con1) ---

DETAIL_SECTION = "div#tab_con1"

# mode: "text" = td text, "em" = first em in td, "combined" = text of the em's parent,
# "split" = td text split into two fields by pattern
DetailRule = namedtuple("DetailRule", ["label", "fields", "mode", "pattern"])

PAIR_PATTERN = r"(.+?)\s*l\s*(.+)"
PAR_VALUE_PATTERN = r"(.+원)\s*l\s*(.+주)"
PER_EPS_PATTERN = r"(.+?배)\s*l\s*(.+원)"

DETAIL_TABLES = [
    ("table[summary='시가총액 정보']", [
        DetailRule("시가총액순위", ("market_cap_rank",), "text", None),
        DetailRule("시가총액", ("market_cap",), "combined", None),
        DetailRule("상장주식수", ("listed_shares_count",), "em", None),
        DetailRule("액면가", ("par_value", "trading_unit"), "split", PAR_VALUE_PATTERN),
    ]),
    ("table[summary='외국인한도주식 정보']", [
        DetailRule("외국인한도주식수", ("foreign_limit_shares",), "em", None),
        DetailRule("외국인보유주식수", ("foreign_held_shares",), "em", None),
        DetailRule("외국인소진율", ("foreign_exhaustion_rate",), "em", None),
    ]),
    ("div:not(.gray) > table[summary='투자의견 정보']", [
        DetailRule("투자의견", ("investment_opinion", "target_price"), "split", PAIR_PATTERN),
        DetailRule("52주최고", ("fifty_two_week_high", "fifty_two_week_low"), "split", PAIR_PATTERN),
    ]),
    ("table.per_table[summary='PER/EPS 정보']", [
        DetailRule("추정PER", ("estimated_per", "estimated_eps"), "split", PER_EPS_PATTERN),
        DetailRule("PER", ("current_per", "current_eps"), "split", PER_EPS_PATTERN),
        DetailRule("PBR", ("pbr", "bps"), "split", PER_EPS_PATTERN),
        DetailRule("배당수익률", ("dividend_yield",), "em", None),
    ]),
    ("table[summary='동일업종 PER 정보']", [
        DetailRule("동일업종PER", ("industry_per",), "em", None),
        DetailRule("동일업종등락률", ("industry_change_rate",), "em", None),
    ]),
]

# --- Price summary box ---

# One cell may hold two label/value pairs, e.g. 고가 and (상한가
PRICE_SUMMARY_LABELS = "div.rate_info table.no_info span.sptxt"
PRICE_TODAY = "div.rate_info p.no_today em span.blind"

PRICE_SUMMARY = {
    "전일": "previous_close",
    "고가": "high_price",
    "상한가": "upper_limit_price",
    "저가": "low_price",
    "하한가": "lower_limit_price",
    "시가": "opening_price",
    "거래량": "volume",
    "거래대금": "trading_value",
}

# --- Field types ---

STRING_FIELDS = (
    "stock_code", "stock_name", "change_price", "change_rate",
    "oper_profit_growth_rate", "earning_per_share", "roe", "market_cap",
    "market_cap_rank", "investment_opinion", "current_per", "estimated_per", "pbr",
    "dividend_yield", "foreign_exhaustion_rate", "industry_per", "industry_change_rate",
)

INT_FIELDS = (
    "current_price", "sales_revenue", "oper_profit", "adjusted_oper_profit",
    "net_income", "par_value", "trading_unit", "target_price",
    "fifty_two_week_high", "fifty_two_week_low", "current_eps", "estimated_eps", "bps",
    "previous_close", "opening_price", "high_price", "low_price",
    "upper_limit_price", "lower_limit_price",
)

LONG_FIELDS = (
    "listed_shares_count", "volume", "trading_value",
    "foreign_limit_shares", "foreign_held_shares",
)

FIELD_TYPES = {
    **{name: clean_text for name in STRING_FIELDS},
    **{name: parse_int for name in INT_FIELDS},
    **{name: parse_long for name in LONG_FIELDS},
}


def to_typed_fields(raw):
    """
    Convert a raw field -> string mapping into typed values.
    Unparseable or empty values become None; unknown fields are dropped.
    """
    typed = {}
    for name, value in raw.items():
        convert = FIELD_TYPES.get(name)
        if convert is None:
            continue
        value = convert(value)
        if value == "":
            value = None
        typed[name] = value
    return typed
