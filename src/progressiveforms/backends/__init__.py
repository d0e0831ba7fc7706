"""Recommendation backends."""

from progressiveforms.backends.openai_recommender import OpenAIRecommendationBackend
from progressiveforms.typing.protocol import RecommendationBackend

__all__ = [
    "OpenAIRecommendationBackend",
    "RecommendationBackend",
]
