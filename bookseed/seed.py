"""Seeding stages run against a connected Database."""
import asyncio
import logging
import random
import time
from datetime import date
from typing import Dict, List, Optional

from bookseed.categories import CATEGORY_DESCRIPTIONS, GENERAL, TAXONOMY
from bookseed.models import CleanedBook
from bookseed.parse import deduplicate_records
from bookseed.reviews import DEFAULT_POOL_SIZE, ReviewGenerator

logger = logging.getLogger(__name__)

PUBLISHER = "Solson Publications"
ISBN_ALPHABET = "0123456789abcdefghijklmnopqrstuvwxyz"


def seed_categories(db) -> Dict[str, int]:
    """Upsert every taxonomy label and return name -> id."""
    category_ids = {
        name: db.upsert_category(name, CATEGORY_DESCRIPTIONS[name])
        for name in TAXONOMY
    }
    logger.info(f"✅ Created {len(category_ids)} categories")
    return category_ids


def placeholder_isbn(rng: random.Random) -> str:
    """Catalog placeholder for books whose export carries no ISBN."""
    return "978-" + "".join(rng.choices(ISBN_ALPHABET, k=9))


def _storefront_fields(rng: random.Random) -> Dict[str, object]:
    # Columns the storefront displays but the source exports never carry
    return {
        "format": "PDF",
        "language": "English",
        "publisher": PUBLISHER,
        "publish_date": date(2020 + rng.randrange(5), rng.randrange(1, 13), rng.randint(1, 28)),
        "page_count": rng.randint(150, 549),
        "featured": rng.random() > 0.8,
    }


def seed_catalog(
    db,
    books: List[CleanedBook],
    rng: Optional[random.Random] = None,
    clear_existing: bool = True
) -> List[int]:
    """
    Persist cleaned books under their categories.

    Args:
        db: Connected Database
        books: De-duplicated, normalized books
        rng: Random source for synthesized columns
        clear_existing: Delete existing books and reviews first

    Returns:
        Ids of the created books
    """
    rng = rng or random.Random()

    if clear_existing:
        db.clear_catalog()

    category_ids = seed_categories(db)
    logger.info(f"📚 Seeding {len(books)} books...")

    book_ids = []
    for book in books:
        category_id = category_ids.get(book.category, category_ids[GENERAL])
        description = book.description or f"A comprehensive book on {book.category.lower()}."

        book_ids.append(db.create_book(
            title=book.title,
            author=book.author,
            price=book.price,
            category_id=category_id,
            description=description,
            isbn=book.isbn or placeholder_isbn(rng),
            cover_image=book.cover_image,
            **_storefront_fields(rng)
        ))

        if len(book_ids) % 10 == 0:
            logger.info(f"✅ Processed {len(book_ids)} books")

    logger.info(f"🎉 Successfully processed {len(book_ids)} books")
    return book_ids


def remove_duplicate_books(db) -> List[int]:
    """
    Delete persisted books that repeat an earlier title/author pair.

    The oldest row is kept. Reviews of the removed books are deleted
    before the books themselves.

    Returns:
        Ids of the deleted books
    """
    logger.info("🔍 Checking for duplicate books...")

    books = db.find_books()
    deduped = deduplicate_records(books)
    keep = {book.id for book in deduped.unique}
    duplicate_ids = [book.id for book in books if book.id not in keep]

    if not duplicate_ids:
        logger.info("✅ No duplicate books found.")
        return []

    logger.info(f"❌ Found {len(duplicate_ids)} duplicate books")
    db.delete_reviews_for_books(duplicate_ids)
    count = db.delete_books(duplicate_ids)
    logger.info(f"🗑️ Deleted {count} duplicate books and their reviews.")
    return duplicate_ids


def generate_reviews(
    db,
    generator: ReviewGenerator,
    pool_size: int = DEFAULT_POOL_SIZE
) -> int:
    """
    Create a reviewer pool and a review batch for every stored book.

    Rerunning appends another corpus; clear reviews first for a clean
    slate, otherwise the (user, book) uniqueness constraint aborts the run.

    Returns:
        Total number of reviews inserted
    """
    logger.info("Generating reviews...")
    books = db.find_books()
    logger.info(f"Found {len(books)} books")

    logger.info("Creating users...")
    users = db.upsert_users(generator.build_user_pool(pool_size))
    logger.info(f"✅ Created/found {len(users)} review users")

    total_reviews = 0
    for processed, book in enumerate(books, 1):
        total_reviews += db.create_reviews(generator.reviews_for_book(book.id, users))

        if processed % 50 == 0:
            logger.info(f"✅ Processed {processed}/{len(books)} books ({total_reviews} reviews so far)")

    logger.info(f"🎉 Successfully generated {total_reviews} reviews for {len(books)} books")
    if books:
        logger.info(f"📊 Average: {round(total_reviews / len(books))} reviews per book")
    return total_reviews


def _batches(items: List, size: int):
    for start in range(0, len(items), size):
        yield start // size + 1, items[start:start + size]


def enrich_covers(
    books: List[CleanedBook],
    client,
    batch_size: int = 10,
    delay: float = 0.05
) -> int:
    """
    Fill blank cover images from the lookup API, a batch at a time.

    Returns:
        Number of covers found
    """
    missing = [book for book in books if not book.cover_image]
    total_batches = (len(missing) + batch_size - 1) // batch_size
    found = 0

    for number, batch in _batches(missing, batch_size):
        logger.info(f"🔄 Processing batch {number}/{total_batches}")
        for book in batch:
            cover = client.lookup_cover(book.title, book.author)
            if cover:
                book.cover_image = cover
                found += 1
        if number < total_batches:
            time.sleep(delay)

    return found


async def enrich_covers_async(
    books: List[CleanedBook],
    client,
    batch_size: int = 10,
    delay: float = 0.05
) -> int:
    """Async variant of enrich_covers; each batch is looked up in parallel."""
    missing = [book for book in books if not book.cover_image]
    total_batches = (len(missing) + batch_size - 1) // batch_size
    found = 0

    for number, batch in _batches(missing, batch_size):
        logger.info(f"🔄 Processing batch {number}/{total_batches}")
        covers = await client.lookup_batch([(book.title, book.author) for book in batch])
        for book, cover in zip(batch, covers):
            if cover:
                book.cover_image = cover
                found += 1
        if number < total_batches:
            await asyncio.sleep(delay)

    return found
