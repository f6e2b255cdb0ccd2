# -*- coding: utf-8 -*-
from typing import Dict, Mapping

import numpy as np
import pandas as pd

from gseabench.ranking import PVALUE, GeneSetRanking
from gseabench.utils import PADJ_METHODS


def _ecdf(x):
    nobs = len(x)
    return np.arange(1, nobs + 1) / float(nobs)


def fdrcorrection(pvals, alpha=0.05):
    """benjamini hocheberg fdr correction. inspired by statsmodels"""
    pvals = np.asarray(pvals)
    pvals_sortind = np.argsort(pvals)
    pvals_sorted = np.take(pvals, pvals_sortind)

    ecdffactor = _ecdf(pvals_sorted)
    reject = pvals_sorted <= ecdffactor * alpha
    if reject.any():
        rejectmax = max(np.nonzero(reject)[0])
        reject[:rejectmax] = True
    pvals_corrected_raw = pvals_sorted / ecdffactor
    pvals_corrected = np.minimum.accumulate(pvals_corrected_raw[::-1])[::-1]
    del pvals_corrected_raw
    pvals_corrected[pvals_corrected > 1] = 1
    pvals_corrected_ = np.empty_like(pvals_corrected)
    pvals_corrected_[pvals_sortind] = pvals_corrected
    del pvals_corrected
    reject_ = np.empty_like(reject)
    reject_[pvals_sortind] = reject
    return reject_, pvals_corrected_


def multiple_testing_correction(ps, alpha=0.05, method="benjamini-hochberg", **kwargs):
    """correct pvalues for multiple testing and add corrected `q` value

    :param ps: list of pvalues
    :param alpha: significance level default : 0.05
    :param method: multiple testing correction method [bonferroni|benjamini-hochberg]
    :returns (q, rej): two lists of q-values and rejected nodes
    """
    _p = np.array(ps, dtype=float)
    q = _p.copy()
    rej = _p.copy()
    mask = ~np.isnan(_p)
    p = _p[mask]
    if method == "bonferroni":
        q[mask] = np.minimum(p * len(p), 1.0)
        rej[mask] = q[mask] < alpha
    elif method == "benjamini-hochberg":
        _rej, _q = fdrcorrection(p, alpha)
        rej[mask] = _rej
        q[mask] = _q
    else:
        raise ValueError(method)
    return q, rej


def nr_sig_sets(
    ranking: GeneSetRanking, alpha: float = 0.05, padj: str = "BH", perc: bool = True
) -> float:
    """number (or percentage) of gene sets with adjusted p-value below alpha"""
    if ranking.kind != PVALUE:
        raise ValueError(
            "Significance needs p-values, ranking statistic is a %s" % ranking.kind
        )
    if padj not in PADJ_METHODS:
        raise ValueError(
            "padj should be one of %s, got %s" % (list(PADJ_METHODS), padj)
        )
    pvals = ranking.statistics
    if len(pvals) == 0:
        return float("nan") if perc else 0
    method = PADJ_METHODS[padj]
    if method is None:
        q = pvals
    else:
        q, _ = multiple_testing_correction(pvals, alpha=alpha, method=method)
    nsig = int(np.sum(q[~np.isnan(q)] < alpha))
    if perc:
        return nsig / len(pvals) * 100
    return nsig


def eval_nr_sig_sets(
    rankings: Mapping[str, Mapping[str, GeneSetRanking]],
    alpha: float = 0.05,
    padj: str = "BH",
    perc: bool = True,
) -> pd.DataFrame:
    """Fraction of significant gene sets for each method and dataset.

    :param rankings: {method: {dataset: GeneSetRanking}} with p-value statistics.
    :param float alpha: significance level. Default: 0.05.
    :param str padj: multiple testing correction, {'BH', 'bonferroni', 'none'}.
    :param bool perc: report percentages instead of counts. Default: True.
    :return: DataFrame, index are datasets, columns are methods.
    """
    res: Dict[str, Dict[str, float]] = {}
    for method, per_dataset in rankings.items():
        res[method] = {
            dataset: nr_sig_sets(ranking, alpha=alpha, padj=padj, perc=perc)
            for dataset, ranking in per_dataset.items()
        }
    df = pd.DataFrame(res)
    df.index.name = "Dataset"
    return df
