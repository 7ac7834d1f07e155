SCHEMA_SQL = r"""
-- Flat key-value namespace: one row per named entry, value is JSON text.
CREATE TABLE IF NOT EXISTS kv_store (
  key TEXT PRIMARY KEY,
  value TEXT NOT NULL,
  updated_at TEXT NOT NULL               -- ISO datetime
);
"""
