"""
Keyword classification for guest stories.

Tables are ordered (key, keywords) pairs. Order matters: categorize() returns
the first key with a matching keyword, so earlier rows take priority.
"""
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

KeywordTable = Sequence[Tuple[str, Sequence[str]]]

STORY_CATEGORIES: KeywordTable = (
    ("wedding-day", ("wedding day", "ceremony", "reception", "altar", "vows", "dress", "tux")),
    ("funny", ("funny", "hilarious", "laugh", "joke", "humor", "silly", "crazy")),
    ("romantic", ("love", "romantic", "kiss", "sweet", "adorable", "cute couple")),
    ("family", ("family", "parents", "siblings", "mom", "dad", "brother", "sister")),
    ("friendship", ("friend", "college", "school", "met", "friendship")),
    ("advice", ("advice", "tips", "marriage", "relationship", "future")),
    ("wishes", ("wish", "hope", "blessing", "congratulations", "happy")),
    ("memories", ("remember", "memory", "moment", "time", "never forget")),
)

DEFAULT_CATEGORY = "memories"

STORY_TAGS: KeywordTable = (
    ("emotional", ("emotional", "tears", "crying", "touched", "moved")),
    ("fun", ("fun", "party", "dance", "music", "celebration")),
    ("special", ("special", "unique", "amazing", "wonderful", "beautiful")),
    ("heartwarming", ("heart", "warm", "sweet", "touching", "precious")),
)

MAX_TAGS = 3

CATEGORY_LABELS: Dict[str, str] = {
    "wedding-day": "Wedding Day Memories",
    "friendship": "Friendship Stories",
    "family": "Family Memories",
    "funny": "Funny Moments",
    "romantic": "Romantic Stories",
    "advice": "Marriage Advice",
    "wishes": "Well Wishes",
    "memories": "Special Memories",
    "uncategorized": "Other Stories",
}


def _text(parts: Iterable[Optional[str]]) -> str:
    return " ".join(p or "" for p in parts).lower()


def categorize(
    parts: Iterable[Optional[str]],
    table: KeywordTable = STORY_CATEGORIES,
    default: str = DEFAULT_CATEGORY,
) -> str:
    """Return the first category in `table` with a keyword contained in the text."""
    text = _text(parts)
    for category, keywords in table:
        if any(keyword in text for keyword in keywords):
            return category
    return default


def extract_tags(
    parts: Iterable[Optional[str]],
    table: KeywordTable = STORY_TAGS,
    limit: int = MAX_TAGS,
) -> List[str]:
    """Every matching tag in table order, truncated to `limit`."""
    text = _text(parts)
    tags = [tag for tag, keywords in table if any(keyword in text for keyword in keywords)]
    return tags[:limit]


def category_facets(
    records: Iterable[Dict[str, Any]],
    labels: Dict[str, str] = CATEGORY_LABELS,
) -> List[Dict[str, Any]]:
    """
    Count records per category.

    Returns [{id, label, count}] in first-seen order; records without a
    category are counted as 'uncategorized'.
    """
    counts: Dict[str, int] = {}
    for record in records:
        category = record.get("category") or "uncategorized"
        counts[category] = counts.get(category, 0) + 1

    return [
        {"id": category, "label": labels.get(category, category), "count": count}
        for category, count in counts.items()
    ]
