# SQL запросы для хранилища сессий

CREATE_SESSIONS_TABLE = """
CREATE TABLE IF NOT EXISTS sessions (
    storage_key TEXT PRIMARY KEY,
    state TEXT,
    data TEXT NOT NULL DEFAULT '{}',
    updated_at DATETIME DEFAULT CURRENT_TIMESTAMP
)
"""

UPSERT_STATE = """
INSERT INTO sessions (storage_key, state) VALUES (?, ?)
ON CONFLICT(storage_key) DO UPDATE SET state = excluded.state, updated_at = CURRENT_TIMESTAMP
"""

UPSERT_DATA = """
INSERT INTO sessions (storage_key, data) VALUES (?, ?)
ON CONFLICT(storage_key) DO UPDATE SET data = excluded.data, updated_at = CURRENT_TIMESTAMP
"""

SELECT_STATE = "SELECT state FROM sessions WHERE storage_key = ?"

SELECT_DATA = "SELECT data FROM sessions WHERE storage_key = ?"

# Сброшенная сессия (без состояния и данных) не хранится
DELETE_EMPTY = "DELETE FROM sessions WHERE storage_key = ? AND state IS NULL AND data = '{}'"

ALL_TABLES = [
    CREATE_SESSIONS_TABLE,
]
