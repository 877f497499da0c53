"""Vector similarity helpers used by the search path.

Both functions work on plain ``list[float]`` inputs and convert to numpy
arrays internally so callers never need to import numpy themselves.
"""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np


def cosine_similarity_matrix(
    left: Sequence[Sequence[float]],
    right: Sequence[Sequence[float]],
) -> np.ndarray:
    """Return the ``len(left) x len(right)`` matrix of cosine similarities.

    Zero-norm rows produce a similarity of ``0.0`` rather than NaN.
    """
    a = np.asarray(left, dtype=np.float64)
    b = np.asarray(right, dtype=np.float64)
    if a.size == 0 or b.size == 0:
        return np.zeros((len(left), len(right)))

    a_norm = np.linalg.norm(a, axis=1, keepdims=True)
    b_norm = np.linalg.norm(b, axis=1, keepdims=True)
    a_norm[a_norm == 0] = 1.0
    b_norm[b_norm == 0] = 1.0
    return (a / a_norm) @ (b / b_norm).T


def maximal_marginal_relevance(
    query_vector: Sequence[float],
    candidate_vectors: Sequence[Sequence[float]],
    k: int = 20,
    lambda_mult: float = 0.5,
) -> list[int]:
    """Select up to *k* candidate indices by maximal marginal relevance.

    The candidate most similar to the query is always picked first.  Each
    following pick maximises::

        lambda_mult * sim(query, c) - (1 - lambda_mult) * max(sim(c, s) for s in selected)

    so ``lambda_mult=1.0`` degenerates to plain similarity ranking and
    ``0.0`` to maximum diversity.  Returned indices are in selection order.
    """
    if k <= 0 or not candidate_vectors:
        return []

    query_sim = cosine_similarity_matrix([query_vector], candidate_vectors)[0]
    pairwise = cosine_similarity_matrix(candidate_vectors, candidate_vectors)
    limit = min(k, len(candidate_vectors))

    selected: list[int] = [int(np.argmax(query_sim))]
    while len(selected) < limit:
        best_idx = -1
        best_score = -np.inf
        for idx in range(len(candidate_vectors)):
            if idx in selected:
                continue
            redundancy = float(np.max(pairwise[idx, selected]))
            score = lambda_mult * float(query_sim[idx]) - (1 - lambda_mult) * redundancy
            if score > best_score:
                best_score = score
                best_idx = idx
        selected.append(best_idx)

    return selected
