import dataclasses
from typing import Optional
from quotes.models import QuoteRecord
from quotes.storage import QuoteStore


class MySQLQuoteStore(QuoteStore):
    """
    MySQL implementation of QuoteStore.
    Columns mirror QuoteRecord field names one to one.
    """

    _COLUMNS = QuoteRecord.column_names()

    def __init__(self, connection_pool):
        self._pool = connection_pool

    def save(self, quote: QuoteRecord) -> QuoteRecord:
        placeholders = ", ".join(["%s"] * len(self._COLUMNS))
        sql = f"INSERT INTO quotes ({', '.join(self._COLUMNS)}) VALUES ({placeholders})"
        values = tuple(getattr(quote, name) for name in self._COLUMNS)
        with self._pool.cursor() as cursor:
            cursor.execute(sql, values)
            self._pool.commit()
            return dataclasses.replace(quote, id=cursor.lastrowid)

    def find_by_id(self, quote_id: int) -> Optional[QuoteRecord]:
        sql = f"SELECT id, {', '.join(self._COLUMNS)} FROM quotes WHERE id = %s"
        with self._pool.cursor() as cursor:
            cursor.execute(sql, (quote_id,))
            row = cursor.fetchone()
            if row:
                return self._row_to_quote(row)
        return None

    def find_latest(self, stock_code: str) -> Optional[QuoteRecord]:
        sql = f"""
            SELECT id, {', '.join(self._COLUMNS)} FROM quotes
            WHERE stock_code = %s AND error_message IS NULL
            ORDER BY collected_at DESC, id DESC
            LIMIT 1
        """
        with self._pool.cursor() as cursor:
            cursor.execute(sql, (stock_code,))
            row = cursor.fetchone()
            if row:
                return self._row_to_quote(row)
        return None

    def _row_to_quote(self, row) -> QuoteRecord:
        values = dict(zip(self._COLUMNS, row[1:]))
        return QuoteRecord(id=row[0], **values)
