from quotes.models import QuoteRecord
from quotes.storage import QuoteStore
from quotes.engine import QuoteCrawler
