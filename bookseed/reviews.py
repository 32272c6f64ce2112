"""Synthetic reviewer accounts and star-rated review text."""
import random
from datetime import datetime, timedelta
from typing import Dict, List, Optional, Sequence

from bookseed.models import SyntheticReview, SyntheticUser

REVIEW_TEMPLATES: Dict[int, List[str]] = {
    5: [
        "Absolutely brilliant! This book exceeded all my expectations. The author's writing style is engaging and the content is incredibly insightful. Highly recommend to anyone interested in this subject.",
        "One of the best books I've read this year. The depth of research and clarity of explanation make complex topics accessible. A must-read!",
        "Outstanding work! Every page offers valuable insights. The practical examples and clear explanations make this an essential resource.",
        "Exceptional quality throughout. The author demonstrates deep expertise while remaining accessible to readers. Cannot recommend this highly enough.",
        "This book is a masterpiece. Comprehensive coverage, excellent writing, and practical applications. Worth every penny.",
        "Phenomenal read! The content is well-organized, thoroughly researched, and presented in an engaging manner. Five stars without hesitation.",
        "Simply amazing. This book transformed my understanding of the subject. The author's expertise shines through on every page.",
        "A true gem! The insights provided are invaluable and the writing is crisp and clear. This belongs on every serious reader's shelf.",
    ],
    4: [
        "Really enjoyed this book. Well-written and informative, though some sections could have been more concise. Overall, highly recommended.",
        "Solid resource with good coverage of the topic. A few areas could be expanded, but generally an excellent read.",
        "Very good book that delivers on its promises. The examples are helpful and the content is relevant. Minor quibbles aside, well worth reading.",
        "Impressive work overall. Some chapters are stronger than others, but the quality is consistently good throughout.",
        "A strong addition to the literature. Clear writing and useful insights, with only minor room for improvement.",
        "Great book with plenty of valuable content. Occasionally dense but generally accessible and worthwhile.",
        "Well-researched and thoughtfully presented. A few sections felt repetitive, but overall an excellent resource.",
    ],
    3: [
        "Decent book with some good insights, although it covers familiar ground in places. Worth reading for specific sections.",
        "A mixed bag. Some parts are excellent, others feel rushed. Still valuable for those interested in the topic.",
        "Reasonable introduction to the subject. Not groundbreaking, but competent and accessible.",
        "Meets expectations. The content is solid if unremarkable. Good for beginners but experienced readers may want more depth.",
        "Fair coverage of the topic. Some sections shine while others could use more development. A respectable effort.",
        "Average quality overall. Has its moments but doesn't stand out from similar books in the field.",
    ],
    2: [
        "Disappointing. The book promised more than it delivered. Some useful information but too much filler content.",
        "Below expectations. The writing is uneven and the organization could be much better. Only recommended with reservations.",
        "Not particularly impressive. Repetitive in places and lacking depth in others. There are better alternatives available.",
        "Underwhelming read. While not without merit, the book fails to deliver on its ambitious scope.",
    ],
    1: [
        "Unfortunately not worth the time. The content is poorly organized and lacks depth. Would not recommend.",
        "Very disappointing. Expected much more based on the description. Save your money and look elsewhere.",
    ],
}

FIRST_NAMES = [
    "James", "Mary", "John", "Patricia", "Robert", "Jennifer", "Michael", "Linda",
    "William", "Elizabeth", "David", "Barbara", "Richard", "Susan", "Joseph", "Jessica",
    "Thomas", "Sarah", "Charles", "Karen", "Christopher", "Nancy", "Daniel", "Lisa",
    "Matthew", "Betty", "Anthony", "Margaret", "Mark", "Sandra", "Donald", "Ashley",
    "Steven", "Kimberly", "Paul", "Emily", "Andrew", "Donna", "Joshua", "Michelle",
]

LAST_NAMES = [
    "Smith", "Johnson", "Williams", "Brown", "Jones", "Garcia", "Miller", "Davis",
    "Rodriguez", "Martinez", "Hernandez", "Lopez", "Gonzalez", "Wilson", "Anderson", "Thomas",
    "Taylor", "Moore", "Jackson", "Martin", "Lee", "Perez", "Thompson", "White",
    "Harris", "Sanchez", "Clark", "Ramirez", "Lewis", "Robinson", "Walker", "Young",
]

RATINGS = (5, 4, 3, 2, 1)
RATING_WEIGHTS = (50, 25, 15, 7, 3)

VERIFIED_PROBABILITY = 0.7
REVIEW_WINDOW = timedelta(days=365)

DEFAULT_POOL_SIZE = 2000
MIN_REVIEWS = 200
MAX_REVIEWS = 1500


class ReviewGenerator:
    """
    Manufacture reviewer accounts and review corpora for demo catalogs.

    All randomness flows through the injected ``rng`` so runs can be
    reproduced with a seeded ``random.Random``.
    """

    def __init__(
        self,
        rng: Optional[random.Random] = None,
        min_reviews: int = MIN_REVIEWS,
        max_reviews: int = MAX_REVIEWS
    ):
        """
        Initialize the generator.

        Args:
            rng: Random source (a fresh unseeded one if omitted)
            min_reviews: Lower bound of reviews per book
            max_reviews: Upper bound of reviews per book
        """
        if min_reviews < 1 or max_reviews < min_reviews:
            raise ValueError(f"Invalid review bounds: [{min_reviews}, {max_reviews}]")

        self.rng = rng or random.Random()
        self.min_reviews = min_reviews
        self.max_reviews = max_reviews

    def random_name(self) -> str:
        return f"{self.rng.choice(FIRST_NAMES)} {self.rng.choice(LAST_NAMES)}"

    def build_user_pool(self, size: int = DEFAULT_POOL_SIZE) -> List[SyntheticUser]:
        """
        Create ``size`` users with unique emails.

        Names may repeat; the index suffix keeps every email distinct.
        """
        users = []
        for i in range(size):
            name = self.random_name()
            email = f"{name.lower().replace(' ', '.')}.{i}@example.com"
            users.append(SyntheticUser(email=email, name=name))
        return users

    def draw_rating(self) -> int:
        return self.rng.choices(RATINGS, weights=RATING_WEIGHTS, k=1)[0]

    def comment_for(self, rating: int) -> str:
        templates = REVIEW_TEMPLATES.get(rating, REVIEW_TEMPLATES[3])
        return self.rng.choice(templates)

    def review_count(self, pool_size: int) -> int:
        """Number of reviews for one book, capped by the reviewer pool."""
        upper = min(self.max_reviews, pool_size)
        lower = min(self.min_reviews, upper)
        if upper <= 0:
            return 0
        return self.rng.randint(lower, upper)

    def select_reviewers(self, users: Sequence[SyntheticUser]) -> List[SyntheticUser]:
        """Pick distinct reviewers for one book (sampling without replacement)."""
        return self.rng.sample(list(users), self.review_count(len(users)))

    def reviews_for_book(
        self,
        book_id: int,
        users: Sequence[SyntheticUser],
        now: Optional[datetime] = None
    ) -> List[SyntheticReview]:
        """
        Build the review batch for a single book.

        Args:
            book_id: Persisted book id
            users: Persisted reviewer pool (``id`` must be set)
            now: Reference time for ``created_at`` (defaults to now)

        Returns:
            One review per selected reviewer
        """
        now = now or datetime.now()
        window = REVIEW_WINDOW.total_seconds()

        reviews = []
        for user in self.select_reviewers(users):
            rating = self.draw_rating()
            reviews.append(SyntheticReview(
                user_id=user.id,
                book_id=book_id,
                rating=rating,
                comment=self.comment_for(rating),
                verified=self.rng.random() < VERIFIED_PROBABILITY,
                created_at=now - timedelta(seconds=self.rng.uniform(0, window)),
            ))

        return reviews
