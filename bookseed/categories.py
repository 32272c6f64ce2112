"""Map free-text tags onto the fixed category taxonomy."""
from typing import Optional, Tuple

GENERAL = "General"

TAXONOMY: Tuple[str, ...] = (
    "Mathematics",
    "Business",
    "Technology",
    "Self-Help",
    "Arts",
    "Education",
    "Health",
    "Science",
    "History",
    GENERAL,
)

CATEGORY_DESCRIPTIONS = {
    "Mathematics": "Mathematics, statistics, probability, and mathematical theory",
    "Business": "Business, economics, marketing, and entrepreneurship",
    "Technology": "Technology, engineering, computer science, and programming",
    "Self-Help": "Personal development, psychology, and self-improvement",
    "Arts": "Arts, literature, music, and cultural studies",
    "Education": "Education, teaching, and learning methodologies",
    "Health": "Health, medicine, wellness, and life sciences",
    "Science": "Science, research, and natural phenomena",
    "History": "History, anthropology, and historical studies",
    GENERAL: "General literature and miscellaneous topics",
}

# Evaluated in order; the first rule with a matching keyword wins
CATEGORY_RULES: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("Mathematics", ("mathematics", "math", "probability", "statistics")),
    ("Business", ("business", "economics", "marketing")),
    ("Technology", ("technology", "engineering", "computer")),
    ("Self-Help", ("self-help", "psychology", "personal")),
    ("Arts", ("music", "art", "literature")),
    ("Education", ("education", "teaching", "learning")),
    ("Health", ("health", "medical", "biochemistry")),
    ("Science", ("science", "chemistry", "physics", "biology", "botany", "nature")),
    ("History", ("history", "anthropology", "archaeology")),
)


def normalize_category(tags: Optional[str]) -> str:
    """
    Map a tag string to exactly one taxonomy label.

    Matching is a case-insensitive substring test over the whole string,
    so comma-separated tag lists are handled without splitting.

    Args:
        tags: Raw tag text, possibly empty or None

    Returns:
        A member of TAXONOMY ("General" when nothing matches)
    """
    if not tags or not tags.strip():
        return GENERAL

    lowered = tags.lower()
    for label, keywords in CATEGORY_RULES:
        if any(keyword in lowered for keyword in keywords):
            return label

    return GENERAL


def is_known_category(label: Optional[str]) -> bool:
    return label in TAXONOMY
