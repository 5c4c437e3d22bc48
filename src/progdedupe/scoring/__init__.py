"""Text similarity scoring."""

from progdedupe.scoring.similarity import normalized_similarity, similarity

__all__ = ["similarity", "normalized_similarity"]
