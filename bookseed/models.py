"""Data models for catalog seeding."""
from dataclasses import dataclass, field, asdict
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

# One unvalidated row from a delimited input file, keyed by header name
RawRecord = Dict[str, str]


class CsvFormat(Enum):
    """Supported input grammars."""
    PIPE = "pipe"
    COMMA = "comma"


@dataclass
class CleanedBook:
    """Validated, normalized book ready for persistence."""
    title: str
    author: str
    description: str = ""
    cover_image: str = ""
    isbn: str = ""
    price: float = 0.0
    category: str = "General"

    def to_json(self) -> Dict[str, object]:
        """Serialize using the intermediate JSON artifact's key names."""
        return {
            "title": self.title,
            "author": self.author,
            "description": self.description,
            "coverImage": self.cover_image,
            "isbn": self.isbn,
            "price": self.price,
            "category": self.category,
        }


@dataclass
class SyntheticUser:
    """Generated reviewer account."""
    email: str
    name: str
    id: Optional[int] = None


@dataclass
class SyntheticReview:
    """Generated star-rated review."""
    user_id: int
    book_id: int
    rating: int
    comment: str
    verified: bool
    created_at: datetime

    def as_row(self) -> tuple:
        return (
            self.user_id, self.book_id, self.rating,
            self.comment, self.verified, self.created_at
        )


@dataclass
class StoredBook:
    """Book row as read back from storage."""
    id: int
    title: str
    author: str
    category: Optional[str] = None
    price: Optional[float] = None
    created_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, object]:
        data = asdict(self)
        if self.created_at:
            data["created_at"] = self.created_at.isoformat()
        return data


@dataclass
class DedupeResult:
    """Outcome of a de-duplication pass."""
    unique: List = field(default_factory=list)
    dropped: List[str] = field(default_factory=list)

    @property
    def dropped_count(self) -> int:
        return len(self.dropped)
