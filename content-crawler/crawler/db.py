"""
Database connection and initialization for the crawler.
Creates the page, link, quote and article tables.
"""

import pymysql
from crawler.core import DB_CONFIG, logger

REQUIRED_TABLES = ("crawled_pages", "extracted_links", "quotes", "articles")

SCHEMA = {
    "crawled_pages": """
    CREATE TABLE IF NOT EXISTS crawled_pages (
        id BIGINT AUTO_INCREMENT PRIMARY KEY,
        url TEXT NOT NULL,
        url_hash CHAR(64) NOT NULL,
        domain VARCHAR(255) NOT NULL,
        html_content LONGTEXT,
        title VARCHAR(1000),
        meta_description TEXT,
        status_code INT,                -- NULL on transport failure
        content_type VARCHAR(255),
        crawled_at DATETIME NOT NULL,
        depth INT NOT NULL,
        parent_id BIGINT NULL,
        error_message TEXT,
        UNIQUE KEY uq_crawled_pages_url (url_hash),
        KEY ix_crawled_pages_domain (domain),
        CONSTRAINT fk_crawled_pages_parent FOREIGN KEY (parent_id)
            REFERENCES crawled_pages (id) ON DELETE SET NULL
    ) ENGINE=InnoDB DEFAULT CHARSET=utf8mb4
    """,
    "extracted_links": """
    CREATE TABLE IF NOT EXISTS extracted_links (
        id BIGINT AUTO_INCREMENT PRIMARY KEY,
        source_page_id BIGINT NOT NULL,
        link_url TEXT NOT NULL,
        link_url_hash CHAR(64) NOT NULL,
        link_text VARCHAR(500),
        link_type VARCHAR(20) NOT NULL, -- internal, external, image, document, unknown
        crawled_at DATETIME NOT NULL,
        UNIQUE KEY uq_extracted_links_edge (source_page_id, link_url_hash),
        CONSTRAINT fk_extracted_links_page FOREIGN KEY (source_page_id)
            REFERENCES crawled_pages (id) ON DELETE CASCADE
    ) ENGINE=InnoDB DEFAULT CHARSET=utf8mb4
    """,
    "quotes": """
    CREATE TABLE IF NOT EXISTS quotes (
        id BIGINT AUTO_INCREMENT PRIMARY KEY,
        source_url VARCHAR(1000) NOT NULL,
        status_code INT,
        error_message TEXT,
        collected_at DATETIME NOT NULL,
        stock_code VARCHAR(20),
        stock_name VARCHAR(100),
        current_price INT,
        change_price VARCHAR(50),
        change_rate VARCHAR(50),
        sales_revenue INT,
        oper_profit INT,
        adjusted_oper_profit INT,
        oper_profit_growth_rate VARCHAR(50),
        net_income INT,
        earning_per_share VARCHAR(50),
        roe VARCHAR(50),
        market_cap VARCHAR(100),
        market_cap_rank VARCHAR(50),
        listed_shares_count BIGINT,
        par_value INT,
        trading_unit INT,
        investment_opinion VARCHAR(50),
        target_price INT,
        fifty_two_week_high INT,
        fifty_two_week_low INT,
        current_per VARCHAR(50),
        current_eps INT,
        estimated_per VARCHAR(50),
        estimated_eps INT,
        pbr VARCHAR(50),
        bps INT,
        dividend_yield VARCHAR(50),
        foreign_limit_shares BIGINT,
        foreign_held_shares BIGINT,
        foreign_exhaustion_rate VARCHAR(50),
        industry_per VARCHAR(50),
        industry_change_rate VARCHAR(50),
        previous_close INT,
        opening_price INT,
        high_price INT,
        low_price INT,
        upper_limit_price INT,
        lower_limit_price INT,
        volume BIGINT,
        trading_value BIGINT,
        KEY ix_quotes_source (source_url(255), collected_at),
        KEY ix_quotes_code (stock_code, collected_at)
    ) ENGINE=InnoDB DEFAULT CHARSET=utf8mb4
    """,
    "articles": """
    CREATE TABLE IF NOT EXISTS articles (
        id BIGINT AUTO_INCREMENT PRIMARY KEY,
        article_url TEXT NOT NULL,
        article_url_hash CHAR(64) NOT NULL,
        source VARCHAR(20) NOT NULL,    -- naver, cnn
        media VARCHAR(100),
        category VARCHAR(100),
        title VARCHAR(1000),
        body_text LONGTEXT,
        html_content LONGTEXT,
        author VARCHAR(255),
        published_at DATETIME NULL,
        crawled_at DATETIME NOT NULL,
        status_code INT,
        error_message TEXT,
        title_translated VARCHAR(1000),
        body_translated LONGTEXT,
        translated_at DATETIME NULL,
        UNIQUE KEY uq_articles_url (article_url_hash),
        KEY ix_articles_source (source, crawled_at)
    ) ENGINE=InnoDB DEFAULT CHARSET=utf8mb4
    """,
}


def get_connection(config=None):
    """
    Create and return a PyMySQL connection using DB_CONFIG.
    """
    return pymysql.connect(**(config or DB_CONFIG))


def initialize_schema(connection):
    """
    Create any missing tables. Existing tables and their rows are left untouched.
    """
    with connection.cursor() as cursor:
        for name in REQUIRED_TABLES:
            cursor.execute(SCHEMA[name])
            logger.info(f"Ensured table {name}", extra={'context': 'db'})
    connection.commit()


def missing_tables(connection):
    with connection.cursor() as cursor:
        cursor.execute("SHOW TABLES")
        existing_tables = {row[0] for row in cursor.fetchall()}
    return [table for table in REQUIRED_TABLES if table not in existing_tables]


def verify_schema(connection) -> bool:
    """
    Startup guard: True if every required table exists, otherwise logs the missing ones.
    """
    missing = missing_tables(connection)
    if missing:
        logger.error(
            f"Database not initialized. Missing tables: {', '.join(missing)}. Run `python main.py init-db`.",
            extra={'context': 'db'}
        )
        return False
    return True
