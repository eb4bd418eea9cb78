import logging
import uuid
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from snapboard.config import config
from snapboard.db.collection import find_collections, find_saved_image_ids
from snapboard.db.image import find_image, find_images_except
from snapboard.db.user import find_users
from snapboard.errors import NotFound
from snapboard.schemas import RecommendationsResponse, ranked_asset_response, source_summary
from snapboard.utils.similarity import rank, score_candidates, source_features

logger = logging.getLogger(__name__)


def clamp_limit(limit: Optional[int]) -> int:
    if limit is None:
        return config.RECOMMENDATION_DEFAULT_LIMIT

    return max(1, min(limit, config.RECOMMENDATION_MAX_LIMIT))


class RecommendationService:
    @staticmethod
    async def recommend(
            db: AsyncSession,
            image_id: uuid.UUID,
            limit: Optional[int] = None,
            user_id: Optional[uuid.UUID] = None,
    ) -> RecommendationsResponse:
        source = await find_image(db, image_id)
        if source is None:
            raise NotFound("Image not found.")

        features = source_features(source)
        if features.empty:
            return RecommendationsResponse(items=[], source=source_summary(source), total_matches=0)

        candidates = await find_images_except(db, source.id)
        scored = score_candidates(features, candidates)
        ranked = rank(scored, clamp_limit(limit))

        owners = await find_users(db, (item.image.owner_id for item in ranked))
        collections = await find_collections(db, (item.image.collection_id for item in ranked))
        saved_ids = (
            await find_saved_image_ids(db, user_id, (item.image.id for item in ranked))
            if user_id is not None
            else set()
        )

        logger.debug(
            "Recommendations for %s: %d candidates, %d matches, %d returned",
            source.id, len(candidates), len(scored), len(ranked)
        )

        return RecommendationsResponse(
            items=[
                ranked_asset_response(
                    item.image,
                    owners.get(item.image.owner_id),
                    collections.get(item.image.collection_id),
                    score=item.score,
                    matched_tags=item.matched_tags,
                    is_saved=item.image.id in saved_ids,
                )
                for item in ranked
            ],
            source=source_summary(source),
            total_matches=len(scored),
        )
