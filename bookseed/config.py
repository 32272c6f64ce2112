"""Configuration management."""
import os
from typing import Optional
from dotenv import load_dotenv

# Load environment variables
load_dotenv()


def _optional_int(name: str) -> Optional[int]:
    value = os.getenv(name)
    return int(value) if value not in (None, "") else None


class Config:
    """Application configuration."""

    # Database
    DB_HOST = os.getenv("DB_HOST", "localhost")
    DB_PORT = os.getenv("DB_PORT", "5432")
    DB_NAME = os.getenv("DB_NAME", "bookstore")
    DB_USER = os.getenv("DB_USER", "postgres")
    DB_PASSWORD = os.getenv("DB_PASSWORD", "")

    @property
    def DATABASE_URL(self):
        """Connection string, preferring an explicit DATABASE_URL."""
        explicit = os.getenv("DATABASE_URL")
        if explicit:
            return explicit
        return f"postgresql://{self.DB_USER}:{self.DB_PASSWORD}@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"

    # Cover lookup API
    GOOGLE_BOOKS_API_KEY = os.getenv("GOOGLE_BOOKS_API_KEY")

    # Defaults
    DEFAULT_TIMEOUT = int(os.getenv("DEFAULT_TIMEOUT", "10"))
    DEFAULT_MAX_RETRIES = int(os.getenv("DEFAULT_MAX_RETRIES", "3"))
    COVER_BATCH_SIZE = int(os.getenv("COVER_BATCH_SIZE", "10"))
    COVER_BATCH_DELAY = float(os.getenv("COVER_BATCH_DELAY", "0.05"))

    # Synthetic data
    REVIEW_USER_POOL = int(os.getenv("REVIEW_USER_POOL", "2000"))
    MIN_REVIEWS_PER_BOOK = int(os.getenv("MIN_REVIEWS_PER_BOOK", "200"))
    MAX_REVIEWS_PER_BOOK = int(os.getenv("MAX_REVIEWS_PER_BOOK", "1500"))
    PRICE_MIN = float(os.getenv("PRICE_MIN", "10"))
    PRICE_MAX = float(os.getenv("PRICE_MAX", "50"))
    SEED_RANDOM_SEED = _optional_int("SEED_RANDOM_SEED")

    @property
    def PRICE_RANGE(self):
        return (self.PRICE_MIN, self.PRICE_MAX)
