"""Lexical similarity between images.

Images are compared by their tags and title words only. Every call scores
the whole candidate list: cost grows with candidates times source features.
"""
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from snapboard.db.models.image import Image

MIN_WORD_LENGTH = 3


@dataclass
class ScoredImage:
    image: Image
    score: int
    matched_tags: List[str] = field(default_factory=list)


@dataclass
class SourceFeatures:
    tags: List[str]
    words: List[str]

    @property
    def empty(self) -> bool:
        return not self.tags and not self.words


def significant_words(title: Optional[str]) -> List[str]:
    return [word for word in (title or "").lower().split() if len(word) >= MIN_WORD_LENGTH]


def source_features(image: Image) -> SourceFeatures:
    return SourceFeatures(tags=list(image.tags or []), words=significant_words(image.title))


def is_candidate(features: SourceFeatures, image: Image) -> bool:
    """Coarse filter: shares a tag, or the title contains a source word."""
    tags = set(image.tags or [])
    title = (image.title or "").lower()
    return any(tag in tags for tag in features.tags) or any(word in title for word in features.words)


def score_image(features: SourceFeatures, image: Image) -> ScoredImage:
    tags = set(image.tags or [])
    title = (image.title or "").lower()

    matched_tags = [tag for tag in features.tags if tag in tags]
    score = 2 * len(matched_tags)
    score += sum(1 for word in features.words if word in title)

    return ScoredImage(image=image, score=score, matched_tags=matched_tags)


def score_candidates(features: SourceFeatures, candidates: Sequence[Image]) -> List[ScoredImage]:
    """Score filtered candidates and drop anything that scored zero."""
    scored = (score_image(features, image) for image in candidates if is_candidate(features, image))
    return [item for item in scored if item.score > 0]


def rank(scored: Sequence[ScoredImage], limit: int) -> List[ScoredImage]:
    """Highest score first, newer images first on ties."""
    ordered = sorted(scored, key=lambda item: (item.score, item.image.created_at), reverse=True)
    return ordered[:max(limit, 0)]
