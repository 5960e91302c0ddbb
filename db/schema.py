# SQL schema for the RecallPrep database

SCHEMA_VERSION = 1

SCHEMA_SQL = """
-- Decks
CREATE TABLE IF NOT EXISTS decks (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT UNIQUE NOT NULL,
    subject TEXT NOT NULL DEFAULT '',
    system_owned INTEGER NOT NULL DEFAULT 0,
    created_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%S+00:00', 'now')),
    deleted_at TEXT
);

-- Cards (with SRS state and cumulative stats)
CREATE TABLE IF NOT EXISTS cards (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    deck_id INTEGER NOT NULL,
    variant TEXT NOT NULL DEFAULT 'basic' CHECK(variant IN (
        'basic', 'basic_inverted', 'cloze', 'multiple_choice',
        'true_false', 'type_answer', 'image_occlusion'
    )),
    payload TEXT NOT NULL DEFAULT '{}',
    interval_days REAL NOT NULL DEFAULT 0,
    repetitions INTEGER NOT NULL DEFAULT 0,
    ease_factor REAL NOT NULL DEFAULT 2.5 CHECK(ease_factor BETWEEN 1.3 AND 2.5),
    next_review_at TEXT NOT NULL,
    last_reviewed_at TEXT,
    last_quality INTEGER CHECK(last_quality BETWEEN 0 AND 5),
    total_reviews INTEGER NOT NULL DEFAULT 0,
    correct_reviews INTEGER NOT NULL DEFAULT 0,
    current_streak INTEGER NOT NULL DEFAULT 0,
    average_answer_seconds REAL,
    version INTEGER NOT NULL DEFAULT 1,
    created_at TEXT NOT NULL,
    deleted_at TEXT,
    FOREIGN KEY (deck_id) REFERENCES decks (id) ON DELETE CASCADE
);

-- Review log
CREATE TABLE IF NOT EXISTS reviews (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    card_id INTEGER NOT NULL,
    deck_id INTEGER NOT NULL,
    quality INTEGER NOT NULL CHECK(quality BETWEEN 0 AND 5),
    interval_days REAL NOT NULL,
    ease_factor REAL NOT NULL,
    answer_seconds REAL,
    reviewed_at TEXT NOT NULL,
    FOREIGN KEY (card_id) REFERENCES cards (id) ON DELETE CASCADE
);
"""

# Indexes for performance
INDEXES_SQL = """
CREATE INDEX IF NOT EXISTS idx_cards_due ON cards (next_review_at);
CREATE INDEX IF NOT EXISTS idx_cards_deck ON cards (deck_id);
CREATE INDEX IF NOT EXISTS idx_cards_deleted ON cards (deleted_at);
CREATE INDEX IF NOT EXISTS idx_decks_deleted ON decks (deleted_at);
CREATE INDEX IF NOT EXISTS idx_reviews_card ON reviews (card_id);
CREATE INDEX IF NOT EXISTS idx_reviews_deck ON reviews (deck_id);
CREATE INDEX IF NOT EXISTS idx_reviews_ts ON reviews (reviewed_at);
"""
