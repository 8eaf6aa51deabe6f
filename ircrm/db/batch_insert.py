from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Any

import psycopg2
from psycopg2.extras import execute_values

"""Batched INSERT via psycopg2.extras.execute_values.

The caller owns the transaction: one call is one import batch, committed or
rolled back as a unit by the store.
"""

__all__ = [
    "StorageError",
    "batch_insert",
]


class StorageError(Exception):
    """A storage backend call failed; the message is surfaced to the caller."""


def batch_insert(
    cursor: Any,
    table: str,
    columns: Sequence[str],
    rows: Iterable[Sequence[Any]],
    page_size: int = 1000,
) -> int:
    """Insert `rows` into `table` and return the number of rows sent.

    Parameters
    ----------
    cursor: psycopg2 cursor
    table: target table (trusted identifier)
    columns: column names, in the order of each row's values
    rows: row value sequences
    page_size: execute_values page size
    """
    rows_list = list(rows)
    if not rows_list:
        return 0

    cols_sql = ",".join(f'"{c}"' for c in columns)
    sql = f"INSERT INTO {table} ({cols_sql}) VALUES %s"
    try:
        execute_values(cursor, sql, rows_list, page_size=page_size)
    except psycopg2.Error as e:
        raise StorageError(str(e).strip() or e.__class__.__name__) from e
    return len(rows_list)
