"""
Database helpers for stored-procedure driven writes.

The posting logic of the finance module lives in MySQL stored
procedures. Views collect the procedure calls they need in a
:class:`Transaction` and execute them in one atomic block, so either
every call is applied or none is.

Identifiers are UUIDs stored as ``BINARY(16)`` columns; :func:`bid`
and :func:`unparse` convert between the two representations.
"""
from __future__ import annotations

import logging
import uuid
from datetime import datetime
from typing import Any, Iterable, Optional

from django.db import DEFAULT_DB_ALIAS, connections
from django.db import transaction as db_transaction

logger = logging.getLogger(__name__)


def bid(value: Any) -> bytes:
    """Return the 16-byte binary form of a UUID (string, UUID or bytes)."""
    if isinstance(value, (bytes, bytearray)):
        if len(value) != 16:
            raise ValueError('binary uuid must be 16 bytes long')
        return bytes(value)
    if isinstance(value, uuid.UUID):
        return value.bytes
    return uuid.UUID(str(value)).bytes


def unparse(value: bytes) -> str:
    """Return the canonical dashed string of a binary UUID."""
    return str(uuid.UUID(bytes=bytes(value)))


def convert(record: dict, keys: Iterable[str]) -> dict:
    """Return a copy of ``record`` with ``keys`` converted to binary uuids.

    Keys that are missing or ``None`` are left untouched.
    """
    converted = dict(record)
    for key in keys:
        if converted.get(key) is not None:
            converted[key] = bid(converted[key])
    return converted


class Transaction:
    """An ordered list of queries executed all-or-nothing."""

    def __init__(self, using: str = DEFAULT_DB_ALIAS) -> None:
        self.using = using
        self.queries: list[tuple[str, list]] = []

    def add_query(self, sql: str, params: Optional[Iterable[Any]] = None) -> 'Transaction':
        self.queries.append((sql, list(params or [])))
        return self

    def add_procedure(self, name: str, *args: Any) -> 'Transaction':
        """Queue ``CALL name(...)`` with one placeholder per argument."""
        placeholders = ', '.join(['%s'] * len(args))
        return self.add_query(f'CALL {name}({placeholders})', args)

    def _adapt(self, value: Any) -> Any:
        if isinstance(value, datetime):
            return connections[self.using].ops.adapt_datetimefield_value(value)
        return value

    def execute(self) -> list:
        """Run every queued query in order inside one transaction.

        Returns the rows produced by each query (``None`` for queries
        without a result set). Any database error rolls the whole
        transaction back and is re-raised unchanged.
        """
        results: list = []
        with db_transaction.atomic(using=self.using):
            with connections[self.using].cursor() as cursor:
                for sql, params in self.queries:
                    logger.debug('executing %s', sql)
                    cursor.execute(sql, [self._adapt(p) for p in params])
                    results.append(cursor.fetchall() if cursor.description else None)
                    # CALL leaves a status result set behind on MySQL
                    nextset = getattr(cursor, 'nextset', None)
                    while nextset is not None and nextset():
                        pass
        logger.info('transaction committed %d queries', len(self.queries))
        return results


def transaction(using: str = DEFAULT_DB_ALIAS) -> Transaction:
    return Transaction(using=using)
