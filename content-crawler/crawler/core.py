"""
FILE DESCRIPTION: Foundational module for global configuration and logging.
KEY FUNCTIONS/CLASSES: setup_logger, ContextFormatter, DB_CONFIG, crawl identity and delay settings
"""

import logging
import sys
import os
from datetime import datetime
from pathlib import Path
from dotenv import load_dotenv

# === CONFIGURATION SECTION ===

# Load .env from the repository root
load_dotenv(Path(__file__).resolve().parents[2] / '.env')


def _env_int(name, default):
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return int(raw)


def _env_float(name, default):
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return float(raw)


def _env_list(name, default):
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return list(default)
    return [part.strip() for part in raw.split(",") if part.strip()]


# Fixed crawler identity sent with every request
USER_AGENT = os.getenv(
    "USER_AGENT",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/100.0.4896.75 Safari/537.36",
)
REFERRER = os.getenv("REFERRER", "https://www.naver.com")

# Network timeout for HTTP requests (seconds)
REQUEST_TIMEOUT = _env_float("REQUEST_TIMEOUT", 10)

# Parser handed to BeautifulSoup
HTML_PARSER = os.getenv("HTML_PARSER", "lxml")

# Generic page crawl
START_URL = os.getenv("START_URL", "")
MAX_DEPTH = _env_int("MAX_DEPTH", 2)
MAX_QUEUE_SIZE = _env_int("MAX_QUEUE_SIZE", 10_000)  # 0 = unbounded
CRAWL_DELAY_MIN = _env_float("CRAWL_DELAY_MIN", 1.0)
CRAWL_DELAY_MAX = _env_float("CRAWL_DELAY_MAX", 4.0)

# Quote pages
QUOTE_BASE_URL = os.getenv("QUOTE_BASE_URL", "https://finance.naver.com/item/main.naver?code=")
QUOTE_CODES = _env_list("QUOTE_CODES", ["005930", "000660", "005380"])

# Article sources. Detail delays are deliberately longer than CRAWL_DELAY_*.
NAVER_NEWS_URLS = _env_list("NAVER_NEWS_URLS", [
    "https://news.naver.com/section/100",  # politics
    "https://news.naver.com/section/101",  # economy
    "https://news.naver.com/section/102",  # society
    "https://news.naver.com/section/103",  # life/culture
    "https://news.naver.com/section/104",  # world
    "https://news.naver.com/section/105",  # IT/science
])
NAVER_REFERRER = os.getenv("NAVER_REFERRER", "https://news.naver.com/")
NAVER_DELAY_MIN = _env_float("NAVER_DELAY_MIN", 30.0)
NAVER_DELAY_MAX = _env_float("NAVER_DELAY_MAX", 60.0)

CNN_URL = os.getenv("CNN_URL", "https://edition.cnn.com/")
CNN_REFERRER = os.getenv("CNN_REFERRER", "https://edition.cnn.com/")
CNN_DELAY_MIN = _env_float("CNN_DELAY_MIN", 15.0)
CNN_DELAY_MAX = _env_float("CNN_DELAY_MAX", 30.0)

# Downstream summarization API
SUMMARIZE_API_URL = os.getenv("SUMMARIZE_API_URL", "http://localhost:8000")
SUMMARIZE_TIMEOUT = _env_float("SUMMARIZE_TIMEOUT", 30)

# Scheduler intervals (seconds between the end of one run and the next start)
QUOTE_JOB_INTERVAL = (_env_float("QUOTE_JOB_INTERVAL_MIN", 120), _env_float("QUOTE_JOB_INTERVAL_MAX", 150))
NEWS_JOB_INTERVAL = (_env_float("NEWS_JOB_INTERVAL_MIN", 1800), _env_float("NEWS_JOB_INTERVAL_MAX", 3600))
PAGE_JOB_INTERVAL = (_env_float("PAGE_JOB_INTERVAL_MIN", 1800), _env_float("PAGE_JOB_INTERVAL_MAX", 3600))
MARKET_TIMEZONE = os.getenv("MARKET_TIMEZONE", "Asia/Seoul")

# MySQL connection settings (PyMySQL keyword arguments)
DB_CONFIG = {
    "host": os.getenv("MYSQL_HOST", "localhost"),
    "port": _env_int("MYSQL_PORT", 3306),
    "user": os.getenv("MYSQL_USER", "root"),
    "password": os.getenv("MYSQL_PASSWORD", ""),
    "database": os.getenv("MYSQL_DATABASE", "crawlerdb"),
    "charset": "utf8mb4",
}

LOG_FILE = os.getenv("LOG_FILE") or None


# === LOGGING SECTION ===

class ContextFormatter(logging.Formatter):
    """
    FLOW: Receives a log record -> Extracts timestamp -> Formats as
    [ Tue Jan 06 05:32:41 AM UTC 2026 ] -> Prepends level and context -> Returns final string.
    """
    def format(self, record):
        dt = datetime.fromtimestamp(record.created)
        timestamp = dt.strftime("%a %b %d %I:%M:%S %p UTC %Y")
        context = getattr(record, 'context', 'root')
        message = f"[ {timestamp} ] : {record.levelname} : {context} : {record.getMessage()}"
        if record.exc_info:
            message = f"{message}\n{self.formatException(record.exc_info)}"
        return message

def setup_logger(name="crawler", log_file=None, level=logging.INFO):
    """
    FLOW: Initializes/Retrieves logger -> Checks for existing handlers to prevent duplicates ->
    Sets propagation for child loggers -> Attaches Console and optional File handlers with ContextFormatter.
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)

    if logger.handlers:
        return logger

    if name != "crawler":
        logger.propagate = True
        setup_logger("crawler", log_file=log_file, level=level)
        return logger

    formatter = ContextFormatter()

    # Console handler
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    # File handler (optional)
    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger

# Global logger instance
logger = setup_logger(log_file=LOG_FILE)
