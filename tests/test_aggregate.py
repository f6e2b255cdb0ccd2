import numpy as np
import pytest

from gseabench import relevance
from gseabench.aggregate import AggregatedResult, RelevanceAggregator
from gseabench.exceptions import InconsistentCandidateSetError
from gseabench.ranking import GeneSetRanking, RelevanceLibrary, RelevanceRanking


@pytest.fixture
def rel_rankings():
    return {
        "ALZ": RelevanceRanking({"GS1": 10, "GS2": 2}),
        "BRCA": RelevanceRanking({"GS3": 4, "GS4": 1}),
    }


@pytest.fixture
def disease_map():
    return {"GSE1": "ALZ", "GSE2": "BRCA", "GSE3": "HD"}


@pytest.fixture
def method_rankings():
    return {
        "ora": {
            "GSE1": GeneSetRanking(["GS1", "GS2", "GS5"]),
            "GSE2": GeneSetRanking(["GS4", "GS3", "GS5"]),
            "GSE3": GeneSetRanking(["GS1"]),
            "GSE4": GeneSetRanking(["GS1"]),
        },
        "gsea": {
            "GSE1": GeneSetRanking(["GS5", "GS2", "GS1"]),
            "GSE2": GeneSetRanking(["GS3", "GS4", "GS5"]),
            "GSE3": GeneSetRanking(["GS2"]),
        },
    }


def test_normalized_table(method_rankings, rel_rankings, disease_map):
    res = RelevanceAggregator(method_rankings, rel_rankings, disease_map).run()
    assert isinstance(res, AggregatedResult)
    assert res.methods == ["ora", "gsea"]
    assert res.datasets == ["GSE1", "GSE2"]
    # GSE1 optimum: GS1 at rank 1 (w=3), GS2 at rank 2 (w=2)
    assert res.optimal.loc["GSE1", "ora"] == 3 * 10 + 2 * 2
    assert res.table.loc["GSE1", "ora"] == 1.0
    assert res.observed.loc["GSE1", "gsea"] == 2 * 2 + 1 * 10
    assert res.table.loc["GSE1", "gsea"] == pytest.approx(14 / 34)
    assert res.table.loc["GSE2", "gsea"] == 1.0
    assert res.as_percent().loc["GSE2", "gsea"] == 100.0
    assert ((res.table >= 0) & (res.table <= 1)).all().all()


def test_missing_data_is_reported(method_rankings, rel_rankings, disease_map):
    res = RelevanceAggregator(method_rankings, rel_rankings, disease_map).run()
    # GSE3 maps to a disease without relevance ranking, GSE4 is not mapped
    assert set(res.omitted) == {"GSE3", "GSE4"}
    assert "HD" in res.omitted["GSE3"]
    assert "GSE4" in res.omitted["GSE4"]
    assert "GSE3" not in res.table.index and "GSE4" not in res.table.index
    report = res.omission_report()
    assert set(report["Dataset"]) == {"GSE3", "GSE4"}


def test_failures_do_not_block_other_pairs(rel_rankings, disease_map):
    rankings = {
        "ora": {"GSE1": GeneSetRanking([]), "GSE2": GeneSetRanking(["GS3"])},
        "gsea": {"GSE1": GeneSetRanking(["GS1", "GS2"])},
    }
    res = RelevanceAggregator(rankings, rel_rankings, disease_map).run()
    assert ("ora", "GSE1") in res.failures
    assert "EmptyRankingError" in res.failures[("ora", "GSE1")]
    assert ("gsea", "GSE2") in res.failures
    assert np.isnan(res.table.loc["GSE1", "ora"])
    assert res.table.loc["GSE2", "ora"] == 1.0
    assert res.table.loc["GSE1", "gsea"] == 1.0


def test_zero_optimum_recorded(rel_rankings, disease_map):
    rankings = {"ora": {"GSE1": GeneSetRanking(["GS8", "GS9"])}}
    res = RelevanceAggregator(rankings, rel_rankings, disease_map).run()
    assert res.observed.loc["GSE1", "ora"] == 0.0
    assert np.isnan(res.table.loc["GSE1", "ora"])
    assert ("ora", "GSE1") in res.failures


def test_candidates_checked(method_rankings, rel_rankings, disease_map):
    candidates = {"GSE1": ["GS1", "GS2"]}
    res = RelevanceAggregator(
        method_rankings, rel_rankings, disease_map, candidates=candidates
    ).run()
    assert "InconsistentCandidateSetError" in res.failures[("ora", "GSE1")]
    assert res.table.loc["GSE2", "ora"] > 0
    with pytest.warns(UserWarning):
        res = RelevanceAggregator(
            method_rankings, rel_rankings, disease_map, candidates=candidates, strict=False
        ).run()
    assert ("ora", "GSE1") not in res.failures


def test_library_input(method_rankings, rel_rankings, disease_map):
    lib = RelevanceLibrary(rel_rankings, disease_map)
    res = RelevanceAggregator(method_rankings, lib).run()
    assert res.datasets == ["GSE1", "GSE2"]


def test_to_long(method_rankings, rel_rankings, disease_map):
    res = RelevanceAggregator(method_rankings, rel_rankings, disease_map).run()
    df = res.to_long()
    assert list(df.columns) == ["Method", "Dataset", "Observed", "Optimal", "Relevance"]
    assert len(df) == 4
    row = df[(df.Method == "gsea") & (df.Dataset == "GSE1")].iloc[0]
    assert row.Observed == 14.0
    assert row.Optimal == 34.0


def test_relevance_writes_tables(tmp_path, method_rankings, rel_rankings, disease_map):
    outdir = str(tmp_path / "rel")
    agg = relevance(method_rankings, rel_rankings, disease_map, outdir=outdir)
    assert agg.res2d.shape == (2, 2)
    files = sorted(p.name for p in (tmp_path / "rel").iterdir())
    assert "relevance.ratio.txt" in files
    assert "relevance.scores.txt" in files
    assert "relevance.omitted.txt" in files


def test_inconsistent_candidates_error_type():
    assert issubclass(InconsistentCandidateSetError, ValueError)
