import sys
import os
import json
import argparse
import threading
from contextlib import closing

# Inject the content-crawler directory into sys.path
# This ensures all sub-packages (crawler, extraction, quotes, articles, ...) are resolvable
# when running from a source checkout without installing.
sys.path.append(os.path.join(os.path.dirname(__file__), "content-crawler"))

from crawler.core import START_URL, MAX_DEPTH, QUOTE_CODES, logger
from crawler.db import get_connection, initialize_schema, verify_schema
from crawler.engine import PageCrawler
from crawler.mysql_storage import MySQLPageStore, MySQLLinkEdgeStore
from quotes.engine import QuoteCrawler
from quotes.mysql_storage import MySQLQuoteStore
from articles.engine import ArticlePipeline
from articles.mysql_storage import MySQLArticleStore
from articles.sources import SOURCES, get_source
from summarize.client import SummarizeService


def connect_or_exit(check_schema=True):
    """
    Startup Guard: open a MySQL connection and verify all required tables exist.
    Exits cleanly with a hint instead of failing mid-crawl.
    """
    try:
        conn = get_connection()
    except Exception as e:
        print(f"DATABASE_ERROR: Failed to connect to MySQL: {e}")
        sys.exit(1)
    if check_schema and not verify_schema(conn):
        print("\nDATABASE NOT INITIALIZED. Run: python main.py init-db\n")
        conn.close()
        sys.exit(1)
    return conn


def print_summary(title, data):
    print("\n" + "=" * 60)
    print(title)
    print("=" * 60)
    print(json.dumps(data, indent=2, ensure_ascii=False, default=str))
    print("=" * 60 + "\n")


# === COMMANDS ===

def cmd_init_db(args):
    with closing(connect_or_exit(check_schema=False)) as conn:
        initialize_schema(conn)
    print("Schema ready.")


def cmd_pages(args):
    url = args.url or START_URL
    if not url:
        print("No start URL. Pass --url or set START_URL.")
        return 2
    with closing(connect_or_exit()) as conn:
        crawler = PageCrawler(MySQLPageStore(conn), MySQLLinkEdgeStore(conn))
        summary = crawler.crawl(url, args.max_depth)
    print_summary("PAGE CRAWL SUMMARY", summary.as_dict())
    return 0


def cmd_quote(args):
    with closing(connect_or_exit()) as conn:
        crawler = QuoteCrawler(MySQLQuoteStore(conn))
        if args.url:
            records = [crawler.crawl(args.url)]
        else:
            records = crawler.crawl_codes(args.code or QUOTE_CODES)
    for record in records:
        print_summary(f"QUOTE {record.stock_code or record.source_url}", {
            k: v for k, v in vars(record).items() if v is not None
        })
    return 0 if all(r.error_message is None for r in records) else 1


def cmd_articles(args):
    names = [args.source] if args.source != "all" else list(SOURCES)
    for name in names:
        with closing(connect_or_exit()) as conn:
            summary = ArticlePipeline(get_source(name), MySQLArticleStore(conn)).run()
        print_summary(f"ARTICLE RUN SUMMARY ({name})", summary.as_dict())
    return 0


def cmd_summarize(args):
    with closing(connect_or_exit()) as conn:
        result = SummarizeService(MySQLArticleStore(conn)).summarize_article(args.id)
    if result is None:
        print(f"Article {args.id} not found.")
        return 1
    print_summary(f"SUMMARY OF ARTICLE {args.id}", result.as_dict())
    return 0


def cmd_schedule(args):
    from scheduler.runner import Scheduler, build_jobs

    # Fail fast on a missing schema; each job opens its own connection per run.
    connect_or_exit().close()
    stop_event = threading.Event()
    scheduler = Scheduler(build_jobs(stop_event, start_url=args.url or START_URL), stop_event)
    logger.info(f"Starting scheduler with {len(scheduler.jobs)} jobs", extra={'context': 'main'})
    scheduler.run_forever()
    return 0


def cmd_serve(args):
    from api.app import app

    app.run(host=args.host, port=args.port)
    return 0


def build_parser():
    parser = argparse.ArgumentParser(description="Content Crawler CLI")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("init-db", help="Create the MySQL tables")
    p.set_defaults(func=cmd_init_db)

    p = sub.add_parser("pages", help="Breadth-first crawl from a start URL")
    p.add_argument("--url", help="Start URL (defaults to START_URL)")
    p.add_argument("--max-depth", type=int, default=MAX_DEPTH, help="Inclusive depth bound")
    p.set_defaults(func=cmd_pages)

    p = sub.add_parser("quote", help="Crawl stock quote pages")
    group = p.add_mutually_exclusive_group()
    group.add_argument("--code", action="append", help="Stock code, repeatable (defaults to QUOTE_CODES)")
    group.add_argument("--url", help="Full quote page URL")
    p.set_defaults(func=cmd_quote)

    p = sub.add_parser("articles", help="Run a news article pipeline")
    p.add_argument("--source", choices=sorted(SOURCES) + ["all"], default="naver")
    p.set_defaults(func=cmd_articles)

    p = sub.add_parser("summarize", help="Summarize a stored article")
    p.add_argument("--id", type=int, required=True, help="Article id")
    p.set_defaults(func=cmd_summarize)

    p = sub.add_parser("schedule", help="Run the periodic jobs until interrupted")
    p.add_argument("--url", help="Start URL for the page job (defaults to START_URL)")
    p.set_defaults(func=cmd_schedule)

    p = sub.add_parser("serve", help="Run the HTTP API")
    p.add_argument("--host", default="127.0.0.1")
    p.add_argument("--port", type=int, default=5000)
    p.set_defaults(func=cmd_serve)

    return parser


if __name__ == "__main__":
    args = build_parser().parse_args()
    sys.exit(args.func(args) or 0)
