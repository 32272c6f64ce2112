"""Tests for synthetic review generation."""
import random
from collections import Counter
from datetime import datetime, timedelta

import pytest

from bookseed.reviews import REVIEW_TEMPLATES, ReviewGenerator


def make_pool(generator, size):
    users = generator.build_user_pool(size)
    for i, user in enumerate(users, 1):
        user.id = i
    return users


def test_user_pool_emails_unique():
    """Test email uniqueness even when names repeat."""
    generator = ReviewGenerator(random.Random(7))
    users = generator.build_user_pool(2000)

    assert len(users) == 2000
    assert len({u.email for u in users}) == 2000
    assert users[5].email.endswith(".5@example.com")
    assert users[5].email.startswith(users[5].name.lower().replace(" ", "."))


def test_review_count_within_bounds():
    """Test per-book counts stay in [200, min(1500, pool)]."""
    generator = ReviewGenerator(random.Random(11))

    counts = [generator.review_count(2000) for _ in range(500)]
    assert min(counts) >= 200
    assert max(counts) <= 1500

    small = [generator.review_count(300) for _ in range(200)]
    assert all(200 <= c <= 300 for c in small)


def test_review_count_smaller_pool_than_minimum():
    """Test clamping when the pool cannot supply the minimum."""
    generator = ReviewGenerator(random.Random(2))

    assert generator.review_count(50) == 50
    assert generator.review_count(0) == 0


def test_reviewers_distinct_per_book():
    """Test sampling without replacement."""
    generator = ReviewGenerator(random.Random(5))
    users = make_pool(generator, 1600)

    reviews = generator.reviews_for_book(book_id=9, users=users)

    user_ids = [r.user_id for r in reviews]
    assert 200 <= len(reviews) <= 1500
    assert len(set(user_ids)) == len(user_ids)
    assert all(r.book_id == 9 for r in reviews)


def test_review_fields():
    """Test rating range, template text and timestamp window."""
    now = datetime(2026, 1, 1, 12, 0, 0)
    generator = ReviewGenerator(random.Random(13))
    users = make_pool(generator, 2000)

    reviews = generator.reviews_for_book(1, users, now=now)

    for review in reviews:
        assert 1 <= review.rating <= 5
        assert review.comment in REVIEW_TEMPLATES[review.rating]
        assert now - timedelta(days=365) <= review.created_at <= now

    verified_share = sum(r.verified for r in reviews) / len(reviews)
    assert 0.55 < verified_share < 0.85


def test_rating_distribution():
    """Test the weighted distribution over a large sample."""
    generator = ReviewGenerator(random.Random(42))

    counts = Counter(generator.draw_rating() for _ in range(100_000))

    expected = {5: 0.50, 4: 0.25, 3: 0.15, 2: 0.07, 1: 0.03}
    for rating, share in expected.items():
        assert abs(counts[rating] / 100_000 - share) < 0.01


def test_seeded_generators_are_reproducible():
    """Test that the injected random source fully determines output."""
    first = ReviewGenerator(random.Random(99))
    second = ReviewGenerator(random.Random(99))

    assert first.build_user_pool(10) == second.build_user_pool(10)
    assert [first.draw_rating() for _ in range(50)] == [second.draw_rating() for _ in range(50)]


def test_invalid_bounds_rejected():
    """Test constructor validation."""
    with pytest.raises(ValueError):
        ReviewGenerator(min_reviews=10, max_reviews=5)
