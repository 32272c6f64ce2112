import pytest

from bookseed.models import StoredBook


class FakeDatabase:
    """In-memory stand-in for Database that records every call."""

    def __init__(self, books=None):
        self.books = list(books or [])
        self.categories = {}
        self.users = {}
        self.reviews = []
        self.calls = []
        self._next_id = 1000

    def _id(self):
        self._next_id += 1
        return self._next_id

    def clear_catalog(self):
        self.calls.append("clear_catalog")
        self.books.clear()
        self.reviews.clear()

    def upsert_category(self, name, description):
        self.calls.append("upsert_category")
        if name not in self.categories:
            self.categories[name] = self._id()
        return self.categories[name]

    def create_book(self, title, author, price, category_id, **fields):
        self.calls.append("create_book")
        book_id = self._id()
        category = next(n for n, i in self.categories.items() if i == category_id)
        self.books.append(StoredBook(book_id, title, author, category, price))
        self.last_book_fields = dict(fields, title=title, author=author, price=price)
        return book_id

    def find_books(self, limit=None):
        return list(self.books[:limit])

    def upsert_users(self, users):
        self.calls.append("upsert_users")
        for user in users:
            if user.email not in self.users:
                self.users[user.email] = self._id()
            user.id = self.users[user.email]
        return list(users)

    def create_reviews(self, reviews):
        self.calls.append("create_reviews")
        self.reviews.extend(reviews)
        return len(reviews)

    def delete_reviews_for_books(self, book_ids):
        self.calls.append("delete_reviews_for_books")
        before = len(self.reviews)
        self.reviews = [r for r in self.reviews if r.book_id not in book_ids]
        return before - len(self.reviews)

    def delete_books(self, book_ids):
        self.calls.append("delete_books")
        before = len(self.books)
        self.books = [b for b in self.books if b.id not in book_ids]
        return before - len(self.books)


@pytest.fixture
def fake_db():
    return FakeDatabase()


@pytest.fixture
def duplicated_db():
    """Catalog where ids 2 and 4 repeat earlier title/author pairs."""
    return FakeDatabase(books=[
        StoredBook(1, "Deep Learning", "Ian Goodfellow"),
        StoredBook(2, "deep learning ", "ian goodfellow"),
        StoredBook(3, "Clean Code", "Robert Martin"),
        StoredBook(4, "CLEAN CODE", "Robert Martin "),
        StoredBook(5, "Clean Code", "Someone Else"),
    ])
