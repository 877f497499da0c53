"""Unit tests for cosine similarity and MMR selection."""

from __future__ import annotations

import numpy as np
import pytest

from src.utils.vector_math import cosine_similarity_matrix, maximal_marginal_relevance


class TestCosineSimilarityMatrix:
    def test_identical_and_orthogonal(self) -> None:
        sim = cosine_similarity_matrix([[1.0, 0.0]], [[2.0, 0.0], [0.0, 3.0]])
        assert sim.shape == (1, 2)
        assert sim[0, 0] == pytest.approx(1.0)
        assert sim[0, 1] == pytest.approx(0.0)

    def test_zero_vector_gives_zero_not_nan(self) -> None:
        sim = cosine_similarity_matrix([[0.0, 0.0]], [[1.0, 1.0]])
        assert not np.isnan(sim).any()
        assert sim[0, 0] == pytest.approx(0.0)

    def test_empty_input(self) -> None:
        assert cosine_similarity_matrix([], [[1.0]]).shape == (0, 1)


class TestMaximalMarginalRelevance:
    def test_most_similar_selected_first(self) -> None:
        query = [1.0, 0.0]
        candidates = [[0.0, 1.0], [1.0, 0.05], [0.7, 0.7]]
        assert maximal_marginal_relevance(query, candidates, k=1)[0] == 1

    def test_diversity_beats_near_duplicate(self) -> None:
        query = [1.0, 0.0, 0.0]
        candidates = [
            [0.9, 0.1, 0.0],    # best match
            [0.9, 0.11, 0.0],   # near-duplicate of the best match
            [0.6, -0.8, 0.0],   # less relevant but different
        ]
        order = maximal_marginal_relevance(query, candidates, k=2, lambda_mult=0.5)
        assert order == [0, 2]

    def test_lambda_one_is_plain_similarity_ranking(self) -> None:
        query = [1.0, 0.0, 0.0]
        candidates = [[0.6, 0.0, 0.8], [1.0, 0.0, 0.0], [0.99, 0.01, 0.0]]
        order = maximal_marginal_relevance(query, candidates, k=3, lambda_mult=1.0)
        assert order == [1, 2, 0]

    def test_k_larger_than_pool(self) -> None:
        order = maximal_marginal_relevance([1.0, 0.0], [[1.0, 0.0], [0.0, 1.0]], k=10)
        assert sorted(order) == [0, 1]

    def test_no_duplicates_in_selection(self) -> None:
        rng = np.random.default_rng(7)
        candidates = rng.normal(size=(30, 8)).tolist()
        order = maximal_marginal_relevance(rng.normal(size=8).tolist(), candidates, k=20)
        assert len(order) == 20
        assert len(set(order)) == 20

    @pytest.mark.parametrize("k", [0, -1])
    def test_non_positive_k(self, k: int) -> None:
        assert maximal_marginal_relevance([1.0], [[1.0]], k=k) == []

    def test_empty_candidates(self) -> None:
        assert maximal_marginal_relevance([1.0, 0.0], [], k=5) == []
