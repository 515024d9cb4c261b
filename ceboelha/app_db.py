# -*- coding: utf-8 -*-
"""App database — SQLite helpers for the diary document store."""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator


def connect(db_path: Path) -> sqlite3.Connection:
    db_path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(db_path), check_same_thread=False)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON;")
    return conn


def init_app_db(db_path: Path) -> None:
    conn = connect(db_path)
    try:
        cur = conn.cursor()
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS diary_entries (
                id TEXT PRIMARY KEY,
                user_id TEXT NOT NULL,
                type TEXT NOT NULL,
                date TEXT NOT NULL,
                symptom_intensity INTEGER,
                payload_json TEXT NOT NULL,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL
            );
            """
        )
        cur.execute(
            "CREATE INDEX IF NOT EXISTS idx_diary_entries_user_date ON diary_entries(user_id, date DESC);"
        )
        cur.execute(
            "CREATE INDEX IF NOT EXISTS idx_diary_entries_user_type_date ON diary_entries(user_id, type, date DESC);"
        )
        cur.execute(
            "CREATE INDEX IF NOT EXISTS idx_diary_entries_user_type_intensity "
            "ON diary_entries(user_id, type, symptom_intensity DESC);"
        )
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS diary_entry_foods (
                entry_id TEXT NOT NULL,
                user_id TEXT NOT NULL,
                food_id INTEGER NOT NULL,
                PRIMARY KEY (entry_id, food_id),
                FOREIGN KEY(entry_id) REFERENCES diary_entries(id) ON DELETE CASCADE
            );
            """
        )
        cur.execute(
            "CREATE INDEX IF NOT EXISTS idx_diary_entry_foods_user_food ON diary_entry_foods(user_id, food_id);"
        )
        conn.commit()
    finally:
        conn.close()


@contextmanager
def db_conn(db_path: Path) -> Iterator[sqlite3.Connection]:
    conn = connect(db_path)
    try:
        yield conn
        conn.commit()
    finally:
        conn.close()
