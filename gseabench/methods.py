# -*- coding: utf-8 -*-
"""Enrichment methods benchmarked by :class:`gseabench.benchmark.Benchmark`.

An enrichment method is any callable

    method(de_table, gene_sets, **kwargs) -> GeneSetRanking

where ``de_table`` is a differential expression table indexed by gene id and
``gene_sets`` is a gmt file or a dict of gene sets. The built-in methods
delegate the statistics to gseapy.
"""

from typing import Callable, Dict, List, Union

import numpy as np
import pandas as pd

from gseabench.parser import read_gmt
from gseabench.ranking import PVALUE, GeneSetRanking

GeneSets = Union[str, Dict[str, List[str]]]

_METHODS: Dict[str, Callable] = {}


def _gene_sets_dict(gene_sets: GeneSets) -> Dict[str, List[str]]:
    if isinstance(gene_sets, dict):
        return gene_sets
    if isinstance(gene_sets, str) and gene_sets.lower().endswith(".gmt"):
        return read_gmt(gene_sets)
    # enrichr library names, the tested universe is unknown here
    return {}


def _with_untested(res: pd.DataFrame, universe: Dict[str, List[str]]) -> pd.DataFrame:
    """append gene sets without a test result with p-value 1"""
    tested = set(res["Term"]) if res is not None else set()
    missing = [t for t in universe if t not in tested]
    extra = pd.DataFrame({"Term": missing, "P-value": np.ones(len(missing))})
    if res is None:
        return extra
    return pd.concat([res[["Term", "P-value"]], extra], ignore_index=True)


def ora(
    de_table: pd.DataFrame,
    gene_sets: GeneSets,
    alpha: float = 0.05,
    padj_col: str = "ADJ.PVAL",
    verbose: bool = False,
    **kwargs,
) -> GeneSetRanking:
    """Over-representation analysis of the differentially expressed genes.

    Genes with ``padj_col < alpha`` are tested against all genes of the table
    with a hypergeometric test (:func:`gseapy.enrich`). Gene sets that share no
    gene with the query are ranked last with p-value 1.
    """
    import gseapy

    genes = de_table.index.astype(str)
    de_genes = genes[(de_table[padj_col] < alpha).values].tolist()
    if len(de_genes) == 0:
        raise ValueError(
            "No differentially expressed genes with %s < %s" % (padj_col, alpha)
        )
    enr = gseapy.enrich(
        gene_list=de_genes,
        gene_sets=gene_sets,
        background=list(genes),
        outdir=None,
        cutoff=1.0,
        no_plot=True,
        verbose=verbose,
    )
    res = _with_untested(enr.res2d, _gene_sets_dict(gene_sets))
    return GeneSetRanking.from_frame(res, term_col="Term", stat_col="P-value", kind=PVALUE)


def prerank(
    de_table: pd.DataFrame,
    gene_sets: GeneSets,
    stat_col: str = "FC",
    permutation_num: int = 1000,
    min_size: int = 15,
    max_size: int = 500,
    seed: int = 123,
    threads: int = 1,
    verbose: bool = False,
    **kwargs,
) -> GeneSetRanking:
    """Gene set enrichment analysis on genes ranked by a DE statistic.

    Runs :func:`gseapy.prerank` and ranks gene sets by their nominal p-value.
    """
    import gseapy

    rnk = de_table[stat_col].astype(float).dropna()
    rnk.index = rnk.index.astype(str)
    pre = gseapy.prerank(
        rnk=rnk,
        gene_sets=gene_sets,
        outdir=None,
        permutation_num=permutation_num,
        min_size=min_size,
        max_size=max_size,
        seed=seed,
        threads=threads,
        no_plot=True,
        verbose=verbose,
    )
    return GeneSetRanking.from_frame(
        pre.res2d, term_col="Term", stat_col="NOM p-val", kind=PVALUE
    )


def register_method(name: str, func: Callable) -> Callable:
    """make an enrichment method available by name"""
    if not callable(func):
        raise ValueError("Enrichment method %s is not callable" % name)
    _METHODS[name] = func
    return func


def get_method(name: Union[str, Callable]) -> Callable:
    if callable(name):
        return name
    try:
        return _METHODS[name]
    except KeyError:
        raise ValueError(
            "Unknown enrichment method: %s. Choose from %s" % (name, available_methods())
        ) from None


def available_methods() -> List[str]:
    return sorted(_METHODS)


register_method("ora", ora)
register_method("prerank", prerank)
