# -*- coding: utf-8 -*-
"""Phenotype relevance of gene set rankings.

The relevance score of a ranking is the weighted sum

    score = sum_r  w(r) * rel(gs_r)

over the gene sets gs_r that have a relevance score, with the linear rank
weights of :func:`gseabench.ranking.rank_weights`. Gene sets without a
relevance score add nothing. The score is normalized by the optimum reached
when the relevant gene sets occupy the top ranks in order of decreasing
relevance, and tested against rankings drawn uniformly at random.
"""

import logging
import warnings
from collections.abc import Mapping
from typing import Iterable, Optional, Sequence, Union

import numpy as np

from gseabench.exceptions import (
    EmptyRankingError,
    InconsistentCandidateSetError,
    InvalidPermutationCountError,
)
from gseabench.ranking import GeneSetRanking, RelevanceRanking, rank_weights
from gseabench.utils import unique

logger = logging.getLogger(__name__)

RankingLike = Union[GeneSetRanking, Sequence]
SeedLike = Union[None, int, np.random.RandomState, np.random.Generator]


def _terms(ranking: RankingLike) -> list:
    """gene set ids of a ranking, in rank order"""
    if isinstance(ranking, GeneSetRanking):
        return list(ranking.terms)
    terms = []
    for item in ranking:
        if isinstance(item, str):
            terms.append(item)
        else:
            # (term, statistic) records
            terms.append(str(item[0]))
    # a repeated id keeps its best rank
    return unique(terms)


def _relevance(relevance: Mapping) -> RelevanceRanking:
    if isinstance(relevance, RelevanceRanking):
        return relevance
    return RelevanceRanking(relevance)


def _candidates(candidates: Iterable[str]) -> list:
    if isinstance(candidates, GeneSetRanking):
        cands = list(candidates.terms)
    else:
        cands = unique([str(c) for c in candidates])
    if len(cands) == 0:
        raise EmptyRankingError("Candidate gene set list must not be empty")
    return cands


def _check_permutations(permutations):
    if (
        isinstance(permutations, bool)
        or not isinstance(permutations, (int, np.integer))
        or permutations < 1
    ):
        raise InvalidPermutationCountError(
            "permutations must be a positive integer, got %r" % (permutations,)
        )


def _random_state(seed: SeedLike):
    if isinstance(seed, (np.random.RandomState, np.random.Generator)):
        return seed
    return np.random.RandomState(seed)


def eval_relevance(ranking: RankingLike, relevance: Mapping) -> float:
    """Relevance score of a gene set ranking.

    :param ranking: a :class:`GeneSetRanking`, or gene set ids (or
                    (id, statistic) records) in rank order.
    :param relevance: gene set id -> relevance score of one disease.
    :return: weighted sum of relevance scores. 0 if no gene set of the
             ranking has a relevance score.
    """
    terms = _terms(ranking)
    relevance = _relevance(relevance)
    weights = rank_weights(len(terms))
    rel = np.array([relevance.get(t, 0.0) for t in terms], dtype=float)
    return float(np.dot(weights, rel))


def comp_opt(relevance: Mapping, candidates: Iterable[str]) -> float:
    """Theoretically optimal relevance score.

    The optimal ranking puts the candidates that have a relevance score on
    top, in decreasing order of relevance, followed by the remaining
    candidates. Its score bounds the score of every ranking of the same
    candidates.

    :param relevance: gene set id -> relevance score of one disease.
    :param candidates: all gene sets tested by the enrichment method.
    """
    rel = _relevance(relevance)
    cands = _candidates(candidates)
    cset = set(cands)
    top = [gs for gs in rel if gs in cset]
    rest = [gs for gs in cands if gs not in rel]
    return eval_relevance(top + rest, rel)


def check_candidates(
    ranking: RankingLike, candidates: Iterable[str], strict: bool = True
) -> bool:
    """Check that the candidates are the gene sets of the ranking.

    :param strict: raise :class:`InconsistentCandidateSetError` on mismatch.
                   Otherwise warn and return False.
    """
    terms = set(_terms(ranking))
    cands = set(_candidates(candidates))
    if terms == cands:
        return True
    msg = (
        "Candidate gene sets do not match the ranking: "
        "%d only in ranking, %d only in candidates"
        % (len(terms - cands), len(cands - terms))
    )
    if strict:
        raise InconsistentCandidateSetError(msg)
    logger.warning(msg)
    warnings.warn(msg, UserWarning, 2)
    return False


def comp_rand(
    relevance: Mapping,
    candidates: Iterable[str],
    permutations: int = 1000,
    seed: SeedLike = None,
) -> np.ndarray:
    """Relevance scores of random rankings.

    Each iteration ranks the candidates by a uniformly random permutation and
    scores it with :func:`eval_relevance`.

    :param relevance: gene set id -> relevance score of one disease.
    :param candidates: all gene sets of the ranking under test.
    :param int permutations: number of random rankings. Default: 1000.
    :param seed: random state, an int seed or a numpy random generator.
                 Concurrent callers should not share one generator.
    :return: array of ``permutations`` scores in the order they were drawn.
    """
    _check_permutations(permutations)
    rel = _relevance(relevance)
    cands = _candidates(candidates)
    n = len(cands)
    weights = rank_weights(n)
    rel_vec = np.array([rel.get(gs, 0.0) for gs in cands], dtype=float)
    rs = _random_state(seed)
    null = np.empty(permutations, dtype=float)
    for i in range(permutations):
        null[i] = np.dot(weights, rel_vec[rs.permutation(n)])
    return null


def empirical_pvalue(observed: float, null_scores: Sequence[float]) -> float:
    """Empirical p-value of an observed relevance score.

    ``p = (#{null >= observed} + 1) / (m + 1)`` for m random scores. Adding one
    to both counts treats the observed ranking as one more draw from the null,
    so p is never 0 and is biased conservatively; the smallest attainable
    value is 1 / (m + 1).
    """
    null = np.asarray(null_scores, dtype=float)
    if null.size == 0:
        raise InvalidPermutationCountError("Null distribution is empty")
    count = int(np.sum(null >= observed))
    return (count + 1) / (null.size + 1)


def normalized_relevance(
    ranking: RankingLike,
    relevance: Mapping,
    candidates: Optional[Iterable[str]] = None,
    strict: bool = True,
) -> float:
    """Observed relevance score divided by the optimal score.

    :param candidates: gene sets for the optimum, default the ranking itself.
    :return: ratio in [0, 1], NaN if the optimum is 0.
    """
    if candidates is None:
        candidates = _terms(ranking)
    else:
        check_candidates(ranking, candidates, strict=strict)
    obs = eval_relevance(ranking, relevance)
    opt = comp_opt(relevance, candidates)
    if opt == 0:
        return float("nan")
    return obs / opt
