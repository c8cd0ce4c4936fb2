"""Static blocked-category table.

Each category has a human-readable label for the AI prompt and, where the
model tends to blur boundaries, a strict scope sentence stating exactly what
belongs to it.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum


class CategoryKey(str, Enum):
    """Category keys a user can flag in ``blocked_categories``."""

    SOCIAL = "social"
    NEWS = "news"
    ENTERTAINMENT = "entertainment"
    GAMES = "games"
    SHOPPING = "shopping"
    MATURE = "mature"


@dataclass(frozen=True)
class CategoryInfo:
    label: str
    scope: str | None = None


CATEGORY_TABLE: Mapping[CategoryKey, CategoryInfo] = {
    CategoryKey.SOCIAL: CategoryInfo(
        label="Social Media (Facebook, Instagram, TikTok, etc.)",
    ),
    CategoryKey.NEWS: CategoryInfo(label="News & Politics"),
    CategoryKey.ENTERTAINMENT: CategoryInfo(
        label="Entertainment (Streaming, non-educational YouTube)",
        scope=(
            "passive watching: movies, TV, streams and videos, including "
            "videos or streams of someone else playing a game"
        ),
    ),
    CategoryKey.GAMES: CategoryInfo(
        label="Games",
        scope=(
            "interactive gameplay only, i.e. pages where the user plays a game; "
            "videos about games are NOT games"
        ),
    ),
    CategoryKey.SHOPPING: CategoryInfo(
        label="Online Shopping (General)",
        scope=(
            "transactional pages only: product listings, carts and checkout; "
            "reviews and unboxings are NOT shopping"
        ),
    ),
    CategoryKey.MATURE: CategoryInfo(
        label="Mature Content (Violence, Adult Themes, etc.)",
    ),
}


def selected_categories(blocked: Mapping[str, bool]) -> list[CategoryKey]:
    """Return the known categories flagged ``True``, in table order.

    Unknown keys in stored data are ignored.
    """
    flagged = {key for key, value in blocked.items() if value is True}
    return [key for key in CATEGORY_TABLE if key.value in flagged]
