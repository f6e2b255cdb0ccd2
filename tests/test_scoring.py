import numpy as np
import pytest

from gseabench.exceptions import (
    EmptyRankingError,
    InconsistentCandidateSetError,
    InvalidPermutationCountError,
)
from gseabench.ranking import GeneSetRanking, RelevanceRanking
from gseabench.scoring import (
    check_candidates,
    comp_opt,
    comp_rand,
    empirical_pvalue,
    eval_relevance,
    normalized_relevance,
)


@pytest.fixture
def ranking():
    return GeneSetRanking.from_records([("GS1", 0.01), ("GS2", 0.5)])


@pytest.fixture
def rel():
    return RelevanceRanking({"GS1": 10, "GS2": 2})


@pytest.fixture
def big_rel():
    return RelevanceRanking({"A": 5.0, "B": 3.0, "C": 1.0, "Z": 7.0})


@pytest.fixture
def candidates():
    return ["A", "B", "C", "D", "E", "F"]


def test_scenario_a(ranking, rel):
    assert eval_relevance(ranking, rel) == 22.0


def test_scenario_b(ranking, rel):
    assert comp_opt(rel, {"GS1", "GS2"}) == 22.0
    assert normalized_relevance(ranking, rel) == 1.0


def test_scenario_c():
    ranking = GeneSetRanking.from_records([("GS3", 0.2)])
    assert eval_relevance(ranking, {"GS1": 10}) == 0.0


def test_scenario_d(rel):
    with pytest.raises(InvalidPermutationCountError):
        comp_rand(rel, ["GS1", "GS2"], permutations=0)
    with pytest.raises(InvalidPermutationCountError):
        comp_rand(rel, ["GS1", "GS2"], permutations=-3)


def test_plain_sequences(rel):
    assert eval_relevance(["GS2", "GS1"], rel) == 2 * 2 + 1 * 10
    assert eval_relevance([("GS2", 0.1), ("GS1", 0.2)], {"GS1": 10, "GS2": 2}) == 14.0


def test_repeated_gene_set_counted_once(rel):
    assert eval_relevance(["GS1", "GS1"], rel) == 10.0
    assert eval_relevance(["GS1", "GS2", "GS1"], rel) == 2 * 10 + 1 * 2
    obs = eval_relevance(["GS1", "GS1"], rel)
    assert obs <= comp_opt(rel, ["GS1", "GS1"])
    assert normalized_relevance(["GS1", "GS1"], rel) == 1.0


def test_invalid_relevance_scores():
    with pytest.raises(ValueError):
        eval_relevance(["A"], {"A": -1.0})
    with pytest.raises(ValueError):
        eval_relevance(["A"], {"A": float("nan")})


def test_empty_ranking(rel):
    with pytest.raises(EmptyRankingError):
        eval_relevance([], rel)
    with pytest.raises(EmptyRankingError):
        comp_opt(rel, [])


def test_unmatched_gene_sets_add_nothing(big_rel):
    # Z is relevant but never tested, D/E are tested but not relevant
    assert eval_relevance(["A", "D", "E"], big_rel) == 3 * 5.0
    assert eval_relevance(["D", "E", "A"], big_rel) == 1 * 5.0


def test_optimum_bounds_permutations(big_rel, candidates):
    opt = comp_opt(big_rel, candidates)
    # A, B, C on top of 6 candidates
    assert opt == 6 * 5.0 + 5 * 3.0 + 4 * 1.0
    rs = np.random.RandomState(0)
    for _ in range(200):
        perm = list(rs.permutation(candidates))
        score = eval_relevance(perm, big_rel)
        assert 0 <= score <= opt


def test_optimum_ignores_duplicated_candidates(big_rel, candidates):
    assert comp_opt(big_rel, candidates + ["A", "D"]) == comp_opt(big_rel, candidates)


def test_idempotent(big_rel, candidates):
    r = GeneSetRanking(candidates)
    assert eval_relevance(r, big_rel) == eval_relevance(r, big_rel)


def test_monotone_swap(big_rel):
    worse = ["D", "B", "E", "A"]
    better = ["A", "B", "E", "D"]  # A (5.0) moved from rank 4 to rank 1
    assert eval_relevance(better, big_rel) >= eval_relevance(worse, big_rel)


def test_comp_rand_reproducible(big_rel, candidates):
    n1 = comp_rand(big_rel, candidates, permutations=50, seed=7)
    n2 = comp_rand(big_rel, candidates, permutations=50, seed=7)
    assert n1.shape == (50,)
    assert np.array_equal(n1, n2)
    n3 = comp_rand(big_rel, candidates, permutations=50, seed=np.random.default_rng(7))
    assert n3.shape == (50,)
    opt = comp_opt(big_rel, candidates)
    assert (n1 >= 0).all() and (n1 <= opt).all()


def test_comp_rand_mean(big_rel, candidates):
    # expected score of a random ranking: mean weight times total relevance
    null = comp_rand(big_rel, candidates, permutations=2000, seed=1)
    expected = np.mean(np.arange(1, 7)) * (5.0 + 3.0 + 1.0)
    assert abs(null.mean() - expected) < 1.0


def test_comp_rand_bad_type(big_rel, candidates):
    with pytest.raises(InvalidPermutationCountError):
        comp_rand(big_rel, candidates, permutations=2.5)
    with pytest.raises(InvalidPermutationCountError):
        comp_rand(big_rel, candidates, permutations=True)


def test_empirical_pvalue():
    null = np.array([1.0, 2.0, 3.0, 4.0])
    assert empirical_pvalue(3.0, null) == 3 / 5
    assert empirical_pvalue(10.0, null) == 1 / 5
    assert empirical_pvalue(0.0, null) == 1.0
    for obs in [-1.0, 0.5, 2.5, 100.0]:
        p = empirical_pvalue(obs, null)
        assert 0 < p <= 1
    with pytest.raises(InvalidPermutationCountError):
        empirical_pvalue(1.0, [])


def test_check_candidates(candidates):
    r = GeneSetRanking(candidates[:3])
    assert check_candidates(r, ["C", "B", "A"])
    with pytest.raises(InconsistentCandidateSetError):
        check_candidates(r, candidates)
    with pytest.warns(UserWarning):
        assert not check_candidates(r, candidates, strict=False)


def test_normalized_relevance(big_rel, candidates):
    r = GeneSetRanking(["D", "A", "B", "C", "E", "F"])
    ratio = normalized_relevance(r, big_rel)
    assert 0 < ratio < 1
    assert ratio == eval_relevance(r, big_rel) / comp_opt(big_rel, candidates)
    with pytest.raises(InconsistentCandidateSetError):
        normalized_relevance(r, big_rel, candidates=["A", "B"])
    assert np.isnan(normalized_relevance(["D", "E"], big_rel))
