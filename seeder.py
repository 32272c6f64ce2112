#!/usr/bin/env python3
"""Bookstore Seeder CLI - clean exports, seed the catalog, generate reviews."""
import argparse
import asyncio
import json
import random
import sys
from tabulate import tabulate
from bookseed.client import CoverClient
from bookseed.async_client import AsyncCoverClient
from bookseed.database import Database
from bookseed.models import CsvFormat
from bookseed.parse import (
    clean_records, load_cleaned_json, load_records, write_cleaned_json
)
from bookseed.reviews import ReviewGenerator
from bookseed.seed import (
    enrich_covers, enrich_covers_async, generate_reviews,
    remove_duplicate_books, seed_catalog
)
from bookseed.config import Config
import logging

# Progress lines go to stdout
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(levelname)s - %(message)s',
    stream=sys.stdout
)
logger = logging.getLogger(__name__)


def make_rng(seed) -> random.Random:
    return random.Random(seed)


def setup_database(config: Config) -> Database:
    """Connect and make sure the schema exists."""
    db = Database(config.DATABASE_URL).connect()
    try:
        db.init_schema()
    except Exception:
        db.close()
        raise
    return db


def clean_books(args, config: Config):
    """Parse a delimited export and write the cleaned JSON artifact."""
    rng = make_rng(args.seed if args.seed is not None else config.SEED_RANDOM_SEED)

    records = load_records(args.input, CsvFormat(args.format))
    logger.info(f"Total records found: {len(records)}")

    books, _ = clean_records(records, rng, config.PRICE_RANGE)
    write_cleaned_json(books, args.output)


def load_books(args, config: Config):
    if args.csv:
        rng = make_rng(config.SEED_RANDOM_SEED)
        books, _ = clean_records(
            load_records(args.csv, CsvFormat(args.format)), rng, config.PRICE_RANGE
        )
        return books
    return load_cleaned_json(
        args.input, make_rng(config.SEED_RANDOM_SEED), config.PRICE_RANGE
    )


def lookup_covers(books, args, config: Config):
    """Best-effort cover enrichment for books without an image."""
    if args.use_async:
        async def run():
            async with AsyncCoverClient(
                api_key=config.GOOGLE_BOOKS_API_KEY,
                timeout=config.DEFAULT_TIMEOUT
            ) as client:
                return await enrich_covers_async(
                    books, client, config.COVER_BATCH_SIZE, config.COVER_BATCH_DELAY
                )
        found = asyncio.run(run())
    else:
        with CoverClient(
            api_key=config.GOOGLE_BOOKS_API_KEY,
            timeout=config.DEFAULT_TIMEOUT,
            max_retries=config.DEFAULT_MAX_RETRIES
        ) as client:
            found = enrich_covers(
                books, client, config.COVER_BATCH_SIZE, config.COVER_BATCH_DELAY
            )
    logger.info(f"Found {found} covers")


def seed_books(args, config: Config):
    """Load cleaned books into the database."""
    logger.info("🌱 Seeding database with books...")
    books = load_books(args, config)

    if args.lookup_covers:
        lookup_covers(books, args, config)

    db = setup_database(config)
    try:
        seed_catalog(
            db, books,
            rng=make_rng(config.SEED_RANDOM_SEED),
            clear_existing=not args.keep_existing
        )
        logger.info("🎉 Database seeding completed!")
    finally:
        db.close()


def seed_reviews(args, config: Config):
    """Remove duplicate books, then generate a review corpus."""
    generator = ReviewGenerator(
        rng=make_rng(args.seed if args.seed is not None else config.SEED_RANDOM_SEED),
        min_reviews=config.MIN_REVIEWS_PER_BOOK,
        max_reviews=config.MAX_REVIEWS_PER_BOOK
    )

    db = setup_database(config)
    try:
        if not args.skip_dedupe:
            remove_duplicate_books(db)
        generate_reviews(db, generator, args.pool_size or config.REVIEW_USER_POOL)
    finally:
        db.close()


def display_books(books, format_type: str):
    """Display books in specified format."""
    if format_type == "table":
        headers = ["ID", "Title", "Author", "Category", "Price"]
        rows = [
            [
                book.id,
                book.title[:50] + "..." if len(book.title) > 50 else book.title,
                book.author[:30] + "..." if len(book.author) > 30 else book.author,
                book.category or "N/A",
                f"{book.price:.2f}" if book.price is not None else "N/A"
            ]
            for book in books
        ]
        print("\n" + tabulate(rows, headers=headers, tablefmt="grid"))

    elif format_type == "json":
        print(json.dumps([book.to_dict() for book in books], indent=2))

    elif format_type == "compact":
        for i, book in enumerate(books, 1):
            print(f"{i}. {book.title} - {book.author}")


def list_books(args, config: Config):
    db = setup_database(config)
    try:
        display_books(db.find_books(limit=args.limit), args.format)
    finally:
        db.close()


def show_stats(args, config: Config):
    """Show database statistics."""
    db = setup_database(config)

    try:
        stats = db.get_stats()
        rows = [[name.replace("_", " ").capitalize(), value] for name, value in stats.items()]
        print("\n" + tabulate(rows, headers=["Metric", "Value"], tablefmt="grid") + "\n")
    finally:
        db.close()


def main():
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Bookstore Seeder - catalog cleaning and demo data CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Clean a comma-delimited export
  %(prog)s clean books_us.csv --format comma --output books_cleaned.json

  # Seed the catalog from the cleaned file, looking up missing covers
  %(prog)s seed --input books_cleaned.json --lookup-covers --async

  # Generate reproducible reviews
  %(prog)s reviews --seed 42

  # Show statistics
  %(prog)s stats
        """
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")
    formats = [fmt.value for fmt in CsvFormat]

    # Clean command
    clean_parser = subparsers.add_parser("clean", help="Parse and de-duplicate a delimited export")
    clean_parser.add_argument("input", help="Delimited input file")
    clean_parser.add_argument("--format", choices=formats, required=True, help="Input grammar")
    clean_parser.add_argument("--output", default="books_cleaned.json", help="Cleaned JSON output")
    clean_parser.add_argument("--seed", type=int, help="Random seed for synthesized prices")

    # Seed command
    seed_parser = subparsers.add_parser("seed", help="Load cleaned books into the database")
    seed_parser.add_argument("--input", default="books_cleaned.json", help="Cleaned JSON file")
    seed_parser.add_argument("--csv", help="Read a delimited export directly instead of JSON")
    seed_parser.add_argument("--format", choices=formats, default="pipe", help="Grammar for --csv")
    seed_parser.add_argument("--keep-existing", action="store_true", help="Do not clear existing books")
    seed_parser.add_argument("--lookup-covers", action="store_true", help="Fetch missing cover images")
    seed_parser.add_argument("--async", dest="use_async", action="store_true", help="Use async lookup client")

    # Reviews command
    reviews_parser = subparsers.add_parser("reviews", help="Generate synthetic reviews")
    reviews_parser.add_argument("--pool-size", type=int, help="Number of reviewer accounts")
    reviews_parser.add_argument("--seed", type=int, help="Random seed")
    reviews_parser.add_argument("--skip-dedupe", action="store_true", help="Keep duplicate books")

    # Books command
    books_parser = subparsers.add_parser("books", help="List stored books")
    books_parser.add_argument("--limit", type=int, default=20, help="Max results (default: 20)")
    books_parser.add_argument("--format", choices=["table", "json", "compact"], default="table", help="Output format")

    # Stats command
    subparsers.add_parser("stats", help="Show database statistics")

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    config = Config()
    commands = {
        "clean": clean_books,
        "seed": seed_books,
        "reviews": seed_reviews,
        "books": list_books,
        "stats": show_stats,
    }

    try:
        commands[args.command](args, config)

    except KeyboardInterrupt:
        logger.info("\n⚠️  Interrupted by user")
        sys.exit(0)
    except Exception as e:
        logger.error(f"❌ Error: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
