# -*- coding: utf-8 -*-
"""Diary — document storage (SQLite).

Each entry is kept whole in ``payload_json``; ``user_id``/``type``/``date``/
``symptom_intensity`` and the ``diary_entry_foods`` rows exist only so the
indexed queries below do not have to scan documents.
"""

from __future__ import annotations

import json
import sqlite3
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union

from ..app_db import db_conn
from ..config import settings
from ..errors import NotFoundError, ValidationError
from .models import MealEntry, SymptomEntry, check_entry_document, entry_to_document, validate_entry_document

Entry = Union[MealEntry, SymptomEntry]


def to_storage_timestamp(value: datetime) -> str:
    """Fixed-width UTC text, so range filters can compare strings."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    try:
        value = value.astimezone(timezone.utc)
    except OverflowError:
        # Local times at the edges of year 1 or 9999 pin to the representable range.
        value = datetime.min if value.year == 1 else datetime.max
    return value.replace(tzinfo=None).isoformat(timespec="microseconds") + "Z"


def _row_to_entry(row: sqlite3.Row) -> Entry:
    return validate_entry_document(json.loads(row["payload_json"]))


def _prepare(entry: Entry) -> Dict[str, Any]:
    doc = entry_to_document(entry)
    violations = check_entry_document(doc)
    if violations:
        raise ValidationError(violations)
    return doc


def _write_foods(conn: sqlite3.Connection, entry: Entry) -> None:
    conn.execute("DELETE FROM diary_entry_foods WHERE entry_id = ?", (entry.id,))
    if not isinstance(entry, MealEntry):
        return
    conn.executemany(
        "INSERT OR IGNORE INTO diary_entry_foods (entry_id, user_id, food_id) VALUES (?, ?, ?)",
        [(entry.id, entry.user_id, food.food_id) for food in entry.meal.foods],
    )


def _intensity(entry: Entry) -> Optional[int]:
    return entry.symptom.intensity if isinstance(entry, SymptomEntry) else None


def insert_entry(entry: Entry) -> Entry:
    doc = _prepare(entry)
    with db_conn(settings.app_db_path) as conn:
        conn.execute(
            """
            INSERT INTO diary_entries (
                id, user_id, type, date, symptom_intensity, payload_json, created_at, updated_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                entry.id,
                entry.user_id,
                entry.type,
                to_storage_timestamp(entry.date),
                _intensity(entry),
                json.dumps(doc, ensure_ascii=False),
                to_storage_timestamp(entry.created_at),
                to_storage_timestamp(entry.updated_at),
            ),
        )
        _write_foods(conn, entry)
    return entry


def replace_entry(entry: Entry) -> Entry:
    doc = _prepare(entry)
    with db_conn(settings.app_db_path) as conn:
        cur = conn.execute(
            """
            UPDATE diary_entries
               SET date = ?, symptom_intensity = ?, payload_json = ?, updated_at = ?
             WHERE id = ?
            """,
            (
                to_storage_timestamp(entry.date),
                _intensity(entry),
                json.dumps(doc, ensure_ascii=False),
                to_storage_timestamp(entry.updated_at),
                entry.id,
            ),
        )
        if cur.rowcount == 0:
            raise NotFoundError("Diary entry")
        _write_foods(conn, entry)
    return entry


def get_entry(entry_id: str) -> Optional[Entry]:
    with db_conn(settings.app_db_path) as conn:
        row = conn.execute("SELECT payload_json FROM diary_entries WHERE id = ?", (entry_id,)).fetchone()
    return _row_to_entry(row) if row else None


def delete_entry(entry_id: str) -> bool:
    with db_conn(settings.app_db_path) as conn:
        cur = conn.execute("DELETE FROM diary_entries WHERE id = ?", (entry_id,))
        return cur.rowcount > 0


def find_entries(
    user_id: str,
    *,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    entry_type: Optional[str] = None,
) -> List[Entry]:
    clauses = ["user_id = ?"]
    params: List[Any] = [user_id]
    if start is not None:
        clauses.append("date >= ?")
        params.append(to_storage_timestamp(start))
    if end is not None:
        clauses.append("date <= ?")
        params.append(to_storage_timestamp(end))
    if entry_type:
        clauses.append("type = ?")
        params.append(entry_type)

    sql = (
        "SELECT payload_json FROM diary_entries WHERE "
        + " AND ".join(clauses)
        + " ORDER BY date DESC, created_at DESC"
    )
    with db_conn(settings.app_db_path) as conn:
        rows = conn.execute(sql, params).fetchall()
    return [_row_to_entry(r) for r in rows]


def find_entries_with_food(user_id: str, food_id: int) -> List[Entry]:
    with db_conn(settings.app_db_path) as conn:
        rows = conn.execute(
            """
            SELECT e.payload_json
              FROM diary_entry_foods f
              JOIN diary_entries e ON e.id = f.entry_id
             WHERE f.user_id = ? AND f.food_id = ?
             ORDER BY e.date DESC
            """,
            (user_id, int(food_id)),
        ).fetchall()
    return [_row_to_entry(r) for r in rows]


def find_most_intense_symptoms(user_id: str, *, limit: int = 10) -> List[Entry]:
    with db_conn(settings.app_db_path) as conn:
        rows = conn.execute(
            """
            SELECT payload_json FROM diary_entries
             WHERE user_id = ? AND type = 'symptom'
             ORDER BY symptom_intensity DESC, date DESC
             LIMIT ?
            """,
            (user_id, int(limit)),
        ).fetchall()
    return [_row_to_entry(r) for r in rows]
