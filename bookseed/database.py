"""Database layer for the storefront catalog."""
import psycopg2
from psycopg2 import pool
from psycopg2.extras import execute_values
from contextlib import contextmanager
from datetime import date
from typing import Optional, List, Dict, Any, Sequence
import logging

from bookseed.models import StoredBook, SyntheticReview, SyntheticUser

logger = logging.getLogger(__name__)

SCHEMA_STATEMENTS = [
    """
    CREATE TABLE IF NOT EXISTS users (
        id SERIAL PRIMARY KEY,
        email VARCHAR(255) NOT NULL UNIQUE,
        name TEXT,
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS categories (
        id SERIAL PRIMARY KEY,
        name VARCHAR(100) NOT NULL UNIQUE,
        description TEXT
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS books (
        id SERIAL PRIMARY KEY,
        title TEXT NOT NULL,
        author TEXT NOT NULL,
        description TEXT,
        isbn VARCHAR(64),
        price NUMERIC(10, 2) NOT NULL,
        cover_image TEXT,
        format VARCHAR(32),
        language VARCHAR(32),
        publisher TEXT,
        publish_date DATE,
        page_count INTEGER,
        featured BOOLEAN DEFAULT FALSE,
        category_id INTEGER NOT NULL REFERENCES categories(id),
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS reviews (
        id SERIAL PRIMARY KEY,
        user_id INTEGER NOT NULL REFERENCES users(id),
        book_id INTEGER NOT NULL REFERENCES books(id),
        rating SMALLINT NOT NULL CHECK (rating BETWEEN 1 AND 5),
        comment TEXT,
        verified BOOLEAN DEFAULT FALSE,
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
        UNIQUE (user_id, book_id)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS cart_items (
        id SERIAL PRIMARY KEY,
        user_id INTEGER NOT NULL REFERENCES users(id),
        book_id INTEGER NOT NULL REFERENCES books(id),
        quantity INTEGER NOT NULL DEFAULT 1,
        UNIQUE (user_id, book_id)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS orders (
        id SERIAL PRIMARY KEY,
        user_id INTEGER NOT NULL REFERENCES users(id),
        total NUMERIC(10, 2) NOT NULL,
        status VARCHAR(32) NOT NULL DEFAULT 'PENDING',
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS order_items (
        id SERIAL PRIMARY KEY,
        order_id INTEGER NOT NULL REFERENCES orders(id),
        book_id INTEGER NOT NULL REFERENCES books(id),
        quantity INTEGER NOT NULL,
        price NUMERIC(10, 2) NOT NULL
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_books_created ON books (created_at, id)",
    "CREATE INDEX IF NOT EXISTS idx_reviews_book ON reviews (book_id)",
]

# Dependent tables first so foreign keys are never violated
CATALOG_TABLES = ["reviews", "cart_items", "order_items", "books"]


class Database:
    """PostgreSQL storage handle backed by a connection pool."""

    def __init__(self, connection_string: str, min_conn: int = 1, max_conn: int = 10):
        """
        Prepare the storage handle. No connection is opened until connect().

        Args:
            connection_string: PostgreSQL connection string
            min_conn: Minimum connections in pool
            max_conn: Maximum connections in pool
        """
        self.connection_string = connection_string
        self.min_conn = min_conn
        self.max_conn = max_conn
        self.connection_pool = None

    def connect(self) -> "Database":
        """Open the connection pool."""
        if self.connection_pool is None:
            self.connection_pool = psycopg2.pool.SimpleConnectionPool(
                self.min_conn,
                self.max_conn,
                self.connection_string
            )
            logger.info("Database connection pool created successfully")
        return self

    @contextmanager
    def _transaction(self):
        """Yield a cursor; commit on success, roll back and re-raise on error."""
        if self.connection_pool is None:
            raise RuntimeError("Database is not connected")

        conn = self.connection_pool.getconn()
        try:
            with conn.cursor() as cur:
                yield cur
            conn.commit()
        except Exception as e:
            conn.rollback()
            logger.error(f"Database operation failed: {e}")
            raise
        finally:
            self.connection_pool.putconn(conn)

    def init_schema(self):
        """Create database tables if they don't exist."""
        with self._transaction() as cur:
            for statement in SCHEMA_STATEMENTS:
                cur.execute(statement)
        logger.info("Database schema initialized successfully")

    def upsert_category(self, name: str, description: str) -> int:
        """Insert or update a category by unique name; returns its id."""
        with self._transaction() as cur:
            cur.execute("""
                INSERT INTO categories (name, description)
                VALUES (%s, %s)
                ON CONFLICT (name) DO UPDATE SET description = EXCLUDED.description
                RETURNING id
            """, (name, description))
            return cur.fetchone()[0]

    def upsert_users(self, users: Sequence[SyntheticUser]) -> List[SyntheticUser]:
        """
        Bulk upsert users by email and fill in their ids.

        Args:
            users: Users with unique emails

        Returns:
            The same users with ``id`` populated
        """
        if not users:
            return []

        with self._transaction() as cur:
            rows = execute_values(cur, """
                INSERT INTO users (email, name) VALUES %s
                ON CONFLICT (email) DO UPDATE SET email = EXCLUDED.email
                RETURNING email, id
            """, [(u.email, u.name) for u in users], fetch=True, page_size=500)

        ids = dict(rows)
        for user in users:
            user.id = ids[user.email]
        return list(users)

    def create_book(
        self,
        title: str,
        author: str,
        price: float,
        category_id: int,
        description: str = "",
        isbn: Optional[str] = None,
        cover_image: Optional[str] = None,
        format: str = "PDF",
        language: str = "English",
        publisher: Optional[str] = None,
        publish_date: Optional[date] = None,
        page_count: Optional[int] = None,
        featured: bool = False
    ) -> int:
        """Insert a book under an existing category; returns its id."""
        with self._transaction() as cur:
            cur.execute("""
                INSERT INTO books (
                    title, author, description, isbn, price, cover_image, format,
                    language, publisher, publish_date, page_count, featured, category_id
                ) VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
                RETURNING id
            """, (
                title, author, description, isbn or None, price, cover_image or None,
                format, language, publisher, publish_date, page_count, featured,
                category_id
            ))
            return cur.fetchone()[0]

    def create_reviews(self, reviews: Sequence[SyntheticReview]) -> int:
        """
        Insert a batch of reviews in a single statement.

        Violating the (user_id, book_id) uniqueness aborts the whole batch.

        Returns:
            Number of rows inserted
        """
        if not reviews:
            return 0

        with self._transaction() as cur:
            execute_values(cur, """
                INSERT INTO reviews (user_id, book_id, rating, comment, verified, created_at)
                VALUES %s
            """, [review.as_row() for review in reviews], page_size=len(reviews))
        return len(reviews)

    def find_books(self, limit: Optional[int] = None) -> List[StoredBook]:
        """List books oldest first."""
        with self._transaction() as cur:
            cur.execute("""
                SELECT b.id, b.title, b.author, c.name, b.price, b.created_at
                FROM books b
                LEFT JOIN categories c ON c.id = b.category_id
                ORDER BY b.created_at ASC, b.id ASC
                LIMIT %s
            """, (limit,))
            return [
                StoredBook(
                    id=row[0], title=row[1], author=row[2], category=row[3],
                    price=float(row[4]) if row[4] is not None else None,
                    created_at=row[5]
                )
                for row in cur.fetchall()
            ]

    def delete_reviews_for_books(self, book_ids: Sequence[int]) -> int:
        if not book_ids:
            return 0
        with self._transaction() as cur:
            cur.execute("DELETE FROM reviews WHERE book_id = ANY(%s)", (list(book_ids),))
            return cur.rowcount

    def delete_books(self, book_ids: Sequence[int]) -> int:
        """Delete books by id. Reviews must be removed first."""
        if not book_ids:
            return 0
        with self._transaction() as cur:
            cur.execute("DELETE FROM books WHERE id = ANY(%s)", (list(book_ids),))
            return cur.rowcount

    def clear_catalog(self) -> None:
        """Remove all books and the rows that reference them."""
        with self._transaction() as cur:
            for table in CATALOG_TABLES:
                cur.execute(f"DELETE FROM {table}")
        logger.info("🗑️ Cleared existing books and reviews")

    def get_stats(self) -> Dict[str, Any]:
        """Get row counts and the average rating."""
        with self._transaction() as cur:
            stats = {}
            for table in ("categories", "books", "users", "reviews"):
                cur.execute(f"SELECT COUNT(*) FROM {table}")
                stats[table] = cur.fetchone()[0]

            cur.execute("SELECT AVG(rating) FROM reviews")
            average = cur.fetchone()[0]
            stats["average_rating"] = round(float(average), 2) if average is not None else None
            return stats

    def close(self):
        """Close all connections in the pool."""
        if self.connection_pool:
            self.connection_pool.closeall()
            self.connection_pool = None
            logger.info("Database connection pool closed")

    def __enter__(self):
        return self.connect()

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
