import numpy as np
import pytest

from gseabench.ranking import GeneSetRanking
from gseabench.stats import (
    eval_nr_sig_sets,
    fdrcorrection,
    multiple_testing_correction,
    nr_sig_sets,
)


@pytest.fixture
def pvals():
    return [0.001, 0.008, 0.039, 0.041, 0.042, 0.06, 0.074, 0.205, 0.212, 0.216]


def test_fdrcorrection(pvals):
    rej, q = fdrcorrection(pvals, alpha=0.05)
    assert (q >= np.array(pvals)).all()
    assert (np.diff(q) >= 0).all()
    assert q[0] == pytest.approx(0.01)
    assert q[-1] == pytest.approx(0.216)
    assert rej[:2].all()


def test_multiple_testing_correction_nan():
    q, rej = multiple_testing_correction([0.01, np.nan, 0.04], method="bonferroni")
    assert np.isnan(q[1])
    assert q[0] == pytest.approx(0.02)
    assert q[2] == pytest.approx(0.08)
    with pytest.raises(ValueError):
        multiple_testing_correction([0.01], method="holm")


def test_nr_sig_sets(pvals):
    terms = ["gs%d" % i for i in range(len(pvals))]
    r = GeneSetRanking.from_records(zip(terms, pvals))
    assert nr_sig_sets(r, alpha=0.05, padj="none", perc=False) == 5
    assert nr_sig_sets(r, alpha=0.05, padj="none") == 50.0
    assert nr_sig_sets(r, alpha=0.05, padj="bonferroni", perc=False) == 1
    assert nr_sig_sets(r, alpha=0.05, padj="BH", perc=False) == 2
    with pytest.raises(ValueError):
        nr_sig_sets(r, padj="holm")


def test_nr_sig_sets_needs_pvalues():
    r = GeneSetRanking.from_records([("a", 2.0)], kind="score")
    with pytest.raises(ValueError):
        nr_sig_sets(r)


def test_eval_nr_sig_sets():
    rankings = {
        "ora": {
            "GSE1": GeneSetRanking.from_records([("a", 0.001), ("b", 0.9)]),
            "GSE2": GeneSetRanking.from_records([("a", 0.5), ("b", 0.9)]),
        },
        "gsea": {"GSE1": GeneSetRanking.from_records([("a", 0.01), ("b", 0.02)])},
    }
    df = eval_nr_sig_sets(rankings, alpha=0.05)
    assert list(df.columns) == ["ora", "gsea"]
    assert df.loc["GSE1", "ora"] == 50.0
    assert df.loc["GSE2", "ora"] == 0.0
    assert df.loc["GSE1", "gsea"] == 100.0
    assert np.isnan(df.loc["GSE2", "gsea"])
