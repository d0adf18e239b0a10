# ABOUTME: SQL DDL statements for the Promethea library database schema.
# ABOUTME: Defines the entity tables, ordered link tables, read history, and indexes.

# Timestamps are ISO-8601 text with millisecond precision so lexical order is time order.
TIMESTAMP_NOW = "strftime('%Y-%m-%dT%H:%M:%f', 'now')"

SCHEMA_V1 = f"""
-- Core book catalog table
CREATE TABLE books (
    id              INTEGER PRIMARY KEY AUTOINCREMENT,
    title           TEXT NOT NULL,
    sort            TEXT NOT NULL,
    date_added      TEXT NOT NULL DEFAULT ({TIMESTAMP_NOW}),
    date_published  TEXT,
    date_modified   TEXT NOT NULL DEFAULT ({TIMESTAMP_NOW}),
    number_of_pages INTEGER,
    goodreads_id    INTEGER,
    CONSTRAINT books_pages_non_negative CHECK (number_of_pages IS NULL OR number_of_pages >= 0),
    CONSTRAINT books_modified_after_added CHECK (date_modified >= date_added)
);

CREATE UNIQUE INDEX idx_books_goodreads_id ON books(goodreads_id);
CREATE INDEX idx_books_sort ON books(sort);
CREATE INDEX idx_books_date_added ON books(date_added);

CREATE TABLE authors (
    id           INTEGER PRIMARY KEY AUTOINCREMENT,
    name         TEXT NOT NULL,
    sort         TEXT NOT NULL,
    goodreads_id INTEGER
);

CREATE UNIQUE INDEX idx_authors_goodreads_id ON authors(goodreads_id);
CREATE INDEX idx_authors_name ON authors(name);

CREATE TABLE series (
    id           INTEGER PRIMARY KEY AUTOINCREMENT,
    name         TEXT NOT NULL,
    sort         TEXT NOT NULL,
    goodreads_id INTEGER
);

CREATE UNIQUE INDEX idx_series_goodreads_id ON series(goodreads_id);
CREATE INDEX idx_series_name ON series(name);

-- Many-to-many: books <-> authors, ordered by position within a book
CREATE TABLE books_authors_link (
    book     INTEGER NOT NULL REFERENCES books(id) ON DELETE CASCADE,
    author   INTEGER NOT NULL REFERENCES authors(id) ON DELETE RESTRICT,
    position INTEGER NOT NULL,
    PRIMARY KEY (book, author)
);

CREATE INDEX idx_books_authors_link_author ON books_authors_link(author);

-- Many-to-many: books <-> series, carrying the volume ("entry") on the edge
CREATE TABLE books_series_link (
    book     INTEGER NOT NULL REFERENCES books(id) ON DELETE CASCADE,
    series   INTEGER NOT NULL REFERENCES series(id) ON DELETE RESTRICT,
    entry    REAL,
    position INTEGER NOT NULL,
    PRIMARY KEY (book, series),
    CONSTRAINT books_series_link_entry_non_negative CHECK (entry IS NULL OR entry >= 0)
);

CREATE INDEX idx_books_series_link_series ON books_series_link(series);

-- Read history: zero or more (re-)reads per book, either date may be unknown
CREATE TABLE read_events (
    id         INTEGER PRIMARY KEY AUTOINCREMENT,
    book       INTEGER NOT NULL REFERENCES books(id) ON DELETE CASCADE,
    start_date TEXT,
    end_date   TEXT,
    CONSTRAINT read_events_end_after_start
        CHECK (start_date IS NULL OR end_date IS NULL OR end_date >= start_date)
);

CREATE INDEX idx_read_events_book ON read_events(book);

-- Schema versioning for out-of-band migrations
CREATE TABLE schema_version (
    version    INTEGER NOT NULL,
    applied_at TEXT NOT NULL DEFAULT ({TIMESTAMP_NOW})
);

INSERT INTO schema_version (version) VALUES (1);
"""

# (version, sql) pairs applied in order on top of SCHEMA_V1.
MIGRATIONS: list[tuple[int, str]] = []

LATEST_SCHEMA_VERSION = max([1, *(version for version, _ in MIGRATIONS)])
