"""Parse, de-duplicate and normalize raw bibliographic exports."""
import json
import logging
import random
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple

from bookseed.categories import is_known_category, normalize_category
from bookseed.models import CleanedBook, CsvFormat, DedupeResult, RawRecord

logger = logging.getLogger(__name__)

DEFAULT_PRICE_RANGE = (10.0, 50.0)


class RecordFileError(Exception):
    """Raised when an input file cannot be found or read."""


def _content_lines(text: str) -> List[str]:
    return [line for line in text.split("\n") if line.strip()]


def _has_title_and_author(record: RawRecord) -> bool:
    return bool(record.get("title", "").strip()) and bool(record.get("authors", "").strip())


def parse_pipe_delimited(text: str) -> List[RawRecord]:
    """
    Parse pipe-delimited text with no quoting.

    Lines with fewer fields than the header are skipped, as are
    records without both a title and an author.

    Args:
        text: Full file content, header on the first non-blank line

    Returns:
        Records in input order (duplicates retained)
    """
    lines = _content_lines(text)
    if len(lines) < 2:
        return []

    headers = [h.strip() for h in lines[0].split("|")]
    records = []
    skipped = 0

    for line in lines[1:]:
        values = [v.strip() for v in line.split("|")]
        if len(values) < len(headers):
            skipped += 1
            continue

        record = {header: values[index] for index, header in enumerate(headers)}
        if _has_title_and_author(record):
            records.append(record)
        else:
            skipped += 1

    logger.debug(f"Pipe parser kept {len(records)} records, skipped {skipped}")
    return records


def split_quoted_line(line: str) -> List[str]:
    """
    Split one comma-delimited line, honoring double-quoted fields.

    A double quote always toggles quoted mode; doubled quotes are not
    treated as an escape.
    """
    fields = []
    current = []
    in_quotes = False

    for char in line:
        if char == '"':
            in_quotes = not in_quotes
        elif char == "," and not in_quotes:
            fields.append("".join(current).strip())
            current = []
        else:
            current.append(char)

    fields.append("".join(current).strip())
    return fields


def parse_comma_delimited(text: str) -> List[RawRecord]:
    """
    Parse comma-delimited text with double-quote aware fields.

    Missing trailing fields default to empty strings; fields beyond
    the header width are ignored.

    Args:
        text: Full file content, header on the first non-blank line

    Returns:
        Records in input order (duplicates retained)
    """
    lines = _content_lines(text)
    if len(lines) < 2:
        return []

    headers = [h.strip() for h in lines[0].split(",")]
    records = []

    for line in lines[1:]:
        values = split_quoted_line(line)
        record = {header: "" for header in headers}
        record.update(zip(headers, values))

        if _has_title_and_author(record):
            records.append(record)

    return records


def read_records(text: str, fmt: CsvFormat) -> List[RawRecord]:
    """Parse file content using the grammar selected by ``fmt``."""
    if fmt is CsvFormat.PIPE:
        return parse_pipe_delimited(text)
    if fmt is CsvFormat.COMMA:
        return parse_comma_delimited(text)
    raise ValueError(f"Unsupported format: {fmt!r}")


def load_records(path, fmt: CsvFormat) -> List[RawRecord]:
    """
    Read and parse a delimited file.

    Raises:
        RecordFileError: If the file is missing or unreadable
    """
    try:
        text = Path(path).read_text(encoding="utf-8")
    except OSError as e:
        raise RecordFileError(f"Cannot read {path}: {e}") from e

    records = read_records(text, fmt)
    logger.info(f"📖 Loaded {len(records)} records from {path}")
    return records


def canonical_key(title: str, author: str) -> str:
    """Case- and whitespace-insensitive identity of a title/author pair."""
    return f"{(title or '').strip().lower()}|{(author or '').strip().lower()}"


def _record_key(item: Any) -> Tuple[str, str]:
    if isinstance(item, dict):
        return item.get("title", ""), item.get("authors", item.get("author", ""))
    return item.title, item.author


def deduplicate_records(items: Iterable[Any]) -> DedupeResult:
    """
    Drop later repeats sharing a canonical title/author key.

    Accepts raw records (``authors`` column) or objects with ``title``
    and ``author`` attributes. The first occurrence wins and relative
    order is preserved.

    Args:
        items: Records or books in input order

    Returns:
        DedupeResult with the unique items and the titles dropped
    """
    seen = set()
    result = DedupeResult()

    for item in items:
        title, author = _record_key(item)
        key = canonical_key(title, author)
        if key in seen:
            result.dropped.append(title)
            continue
        seen.add(key)
        result.unique.append(item)

    return result


def _parse_price(value: Optional[str]) -> Optional[float]:
    try:
        price = float(value)
    except (TypeError, ValueError):
        return None
    return price if price > 0 else None


def clean_record(
    record: RawRecord,
    rng: Optional[random.Random] = None,
    price_range: Tuple[float, float] = DEFAULT_PRICE_RANGE
) -> CleanedBook:
    """
    Normalize a raw record into a CleanedBook.

    Args:
        record: Parsed row with at least title and authors
        rng: Random source used to synthesize a missing price
        price_range: Inclusive (low, high) bounds for synthesized prices

    Returns:
        CleanedBook with defaults filled in
    """
    rng = rng or random.Random()

    price = _parse_price(record.get("price"))
    if price is None:
        price = _synthesized_price(rng, price_range)

    return CleanedBook(
        title=record.get("title", "").strip(),
        author=record.get("authors", "").strip(),
        description=record.get("description", "") or "",
        cover_image=record.get("cover_url", "") or "",
        isbn=record.get("isbn", "") or "",
        price=price,
        category=normalize_category(record.get("tags", "")),
    )


def clean_records(
    records: List[RawRecord],
    rng: Optional[random.Random] = None,
    price_range: Tuple[float, float] = DEFAULT_PRICE_RANGE
) -> Tuple[List[CleanedBook], List[str]]:
    """
    De-duplicate then normalize a batch of raw records.

    Returns:
        (cleaned books, titles of dropped duplicates)
    """
    rng = rng or random.Random()
    deduped = deduplicate_records(records)
    books = [clean_record(record, rng, price_range) for record in deduped.unique]

    logger.info(f"Unique books: {len(books)}")
    logger.info(f"Duplicates removed: {deduped.dropped_count}")
    return books, deduped.dropped


def write_cleaned_json(books: List[CleanedBook], path) -> None:
    """Write the intermediate JSON artifact."""
    with open(path, "w", encoding="utf-8") as f:
        json.dump([book.to_json() for book in books], f, indent=2, ensure_ascii=False)
    logger.info(f"Cleaned data written to {path}")


def _synthesized_price(rng: random.Random, price_range: Tuple[float, float]) -> float:
    low, high = price_range
    return round(rng.uniform(low, high), 2)


def _book_from_json(
    entry: Dict[str, Any],
    rng: random.Random,
    price_range: Tuple[float, float]
) -> Optional[CleanedBook]:
    title = str(entry.get("title") or "").strip()
    author = str(entry.get("author") or "").strip()
    if not title or not author:
        return None

    category = entry.get("category")
    if not is_known_category(category):
        category = normalize_category(category if isinstance(category, str) else None)

    price = _parse_price(entry.get("price"))
    if price is None:
        price = _synthesized_price(rng, price_range)

    return CleanedBook(
        title=title,
        author=author,
        description=entry.get("description") or "",
        cover_image=entry.get("coverImage") or "",
        isbn=entry.get("isbn") or "",
        price=price,
        category=category,
    )


def load_cleaned_json(
    path,
    rng: Optional[random.Random] = None,
    price_range: Tuple[float, float] = DEFAULT_PRICE_RANGE
) -> List[CleanedBook]:
    """
    Load the intermediate JSON artifact.

    Entries without a usable price get one synthesized from ``price_range``.

    Raises:
        RecordFileError: If the file is missing, unreadable, not JSON
            or not a JSON array
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            entries = json.load(f)
    except (OSError, ValueError) as e:
        raise RecordFileError(f"Cannot load {path}: {e}") from e

    if not isinstance(entries, list):
        raise RecordFileError(f"Cannot load {path}: expected a JSON array of books")

    rng = rng or random.Random()
    books = []
    for entry in entries:
        if not isinstance(entry, dict):
            logger.warning(f"⚠️ Skipping non-object entry: {entry!r}")
            continue

        book = _book_from_json(entry, rng, price_range)
        if book:
            books.append(book)
        else:
            logger.warning(f"⚠️ Skipping entry with missing title or author: {entry.get('title')}")

    return books
