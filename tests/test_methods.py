import numpy as np
import pandas as pd
import pytest

from gseabench.methods import ora, prerank

gseapy = pytest.importorskip("gseapy")


@pytest.fixture
def gene_sets():
    return {
        "UP_SET": ["G%d" % i for i in range(0, 20)],
        "MIXED_SET": ["G%d" % i for i in range(40, 60)],
        "DOWN_SET": ["G%d" % i for i in range(80, 100)],
        "ORPHAN_SET": ["X1", "X2", "X3"],
    }


@pytest.fixture
def de_table():
    genes = ["G%d" % i for i in range(100)]
    fc = np.linspace(3, -3, 100)
    padj = np.ones(100)
    padj[:15] = 0.001
    return pd.DataFrame({"FC": fc, "ADJ.PVAL": padj}, index=genes)


def test_ora(de_table, gene_sets):
    ranking = ora(de_table, gene_sets, alpha=0.05)
    assert ranking.kind == "pvalue"
    assert ranking.terms[0] == "UP_SET"
    # gene sets sharing no gene with the query are kept, ranked with p-value 1
    assert set(ranking.terms) == set(gene_sets)
    assert ranking.statistics[ranking.rank_of("ORPHAN_SET") - 1] == 1.0


def test_ora_without_de_genes(de_table, gene_sets):
    with pytest.raises(ValueError):
        ora(de_table, gene_sets, alpha=1e-6)


def test_prerank(de_table, gene_sets):
    ranking = prerank(
        de_table, gene_sets, permutation_num=20, min_size=5, max_size=50, seed=7
    )
    assert ranking.kind == "pvalue"
    assert set(ranking.terms) <= set(gene_sets)
    assert "ORPHAN_SET" not in ranking
    assert len(ranking) == 3
