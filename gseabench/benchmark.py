# -*- coding: utf-8 -*-

import os
import time
from collections.abc import Mapping
from typing import Callable, Dict, List, Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd
from joblib import Parallel, delayed

from gseabench.aggregate import AggregatedResult, RelevanceAggregator
from gseabench.base import BenchmarkBase
from gseabench.exceptions import GSEABenchError, UnknownDatasetError, UnknownDiseaseCodeError
from gseabench.methods import GeneSets, get_method
from gseabench.parser import read_de_tables, read_results, write_results
from gseabench.ranking import GeneSetRanking, RelevanceLibrary
from gseabench.scoring import (
    _check_permutations,
    comp_opt,
    comp_rand,
    empirical_pvalue,
    eval_relevance,
)
from gseabench.stats import eval_nr_sig_sets


def _run_method(
    func: Callable, dataset: str, de_table: pd.DataFrame, gene_sets: GeneSets, kwargs: Dict
) -> Tuple[str, Optional[GeneSetRanking], float, Optional[str]]:
    """run one enrichment method on one dataset, timing the call"""
    start = time.perf_counter()
    try:
        ranking = func(de_table, gene_sets, **kwargs)
    except Exception as exc:
        return dataset, None, time.perf_counter() - start, "%s: %s" % (
            type(exc).__name__,
            exc,
        )
    return dataset, ranking, time.perf_counter() - start, None


class Benchmark(BenchmarkBase):
    """Run enrichment methods on a compendium of datasets and evaluate them.

    Methods are compared by runtime, by the fraction of significant gene sets
    and by the phenotype relevance of their gene set rankings.
    """

    def __init__(
        self,
        datasets: Union[str, Mapping],
        gene_sets: GeneSets,
        methods: Union[Sequence, Mapping] = ("ora",),
        outdir: Optional[str] = None,
        threads: int = 1,
        seed: int = 123,
        verbose: bool = False,
    ):
        super(Benchmark, self).__init__(
            outdir=outdir, module="benchmark", threads=threads, verbose=verbose
        )
        if isinstance(datasets, str):
            datasets = read_de_tables(datasets)
        self.datasets = dict(datasets)
        self.gene_sets = gene_sets
        if isinstance(methods, Mapping):
            self.methods = {name: get_method(m) for name, m in methods.items()}
        else:
            self.methods = {
                (m if isinstance(m, str) else m.__name__): get_method(m)
                for m in methods
            }
        self.seed = seed
        self.rankings: Dict[str, Dict[str, GeneSetRanking]] = {}
        self.runtimes: Dict[str, Dict[str, float]] = {}
        self.errors: Dict[Tuple[str, str], str] = {}
        self.rand_omitted: Dict[str, str] = {}
        self.rand_failures: Dict[str, str] = {}

    def load_results(self, indir: str, methods: Optional[List[str]] = None):
        """use rankings saved by an earlier run instead of running methods"""
        self.rankings = read_results(indir, methods)
        return self.rankings

    def run_ea(self, **kwargs) -> Dict[str, Dict[str, GeneSetRanking]]:
        """Apply each enrichment method to each dataset.

        Keyword arguments are passed on to every method. A method failing on a
        dataset is logged and recorded in ``errors``; the other pairs still run.
        """
        for name, func in self.methods.items():
            self._logger.info(
                "Running %s on %d datasets......" % (name, len(self.datasets))
            )
            res = Parallel(n_jobs=self._threads)(
                delayed(_run_method)(func, ds, table, self.gene_sets, kwargs)
                for ds, table in self.datasets.items()
            )
            self.rankings[name] = {}
            self.runtimes[name] = {}
            for ds, ranking, seconds, err in res:
                self.runtimes[name][ds] = seconds
                if err is not None:
                    self.errors[(name, ds)] = err
                    self._logger.error("%s failed on %s: %s" % (name, ds, err))
                    continue
                self.rankings[name][ds] = ranking
                self._logger.debug(
                    "%s on %s: %d gene sets in %.2fs" % (name, ds, len(ranking), seconds)
                )
        if self.outdir is not None:
            write_results(self.rankings, os.path.join(self.outdir, "rankings"))
        self._logger.info("Done.")
        return self.rankings

    def _check_rankings(self):
        if not self.rankings:
            raise ValueError("No rankings available, call run_ea() or load_results() first")

    def eval_runtime(self) -> pd.DataFrame:
        """seconds per dataset (rows) and method (columns)"""
        if not self.runtimes:
            raise ValueError("No runtimes available, call run_ea() first")
        df = pd.DataFrame(self.runtimes)
        df.index.name = "Dataset"
        self._write_table(df, "runtime")
        return df

    def eval_nr_sig_sets(
        self, alpha: float = 0.05, padj: str = "BH", perc: bool = True
    ) -> pd.DataFrame:
        """percentage (or number) of significant gene sets"""
        self._check_rankings()
        df = eval_nr_sig_sets(self.rankings, alpha=alpha, padj=padj, perc=perc)
        self._write_table(df, "sigsets")
        return df

    def eval_relevance(
        self,
        relevance_rankings: Mapping,
        dataset_disease_map: Optional[Mapping[str, str]] = None,
        strict: bool = True,
    ) -> AggregatedResult:
        """phenotype relevance, normalized by the optimal score"""
        self._check_rankings()
        agg = RelevanceAggregator(
            self.rankings,
            relevance_rankings,
            dataset_disease_map,
            outdir=self.outdir,
            strict=strict,
            verbose=self.verbose,
        )
        return agg.run()

    def rand_relevance(
        self,
        relevance_rankings: Mapping,
        dataset_disease_map: Optional[Mapping[str, str]] = None,
        method: Optional[str] = None,
        permutations: int = 1000,
    ) -> pd.DataFrame:
        """Compare the relevance of one method with random rankings.

        :return: DataFrame, one row per dataset with the observed and optimal
                 score, mean of the random scores and the empirical p-value.
                 Datasets that fail to score get a row of NaN and are listed in
                 ``rand_failures``. Datasets without relevance ranking are left
                 out and listed in ``rand_omitted``.
        """
        self._check_rankings()
        _check_permutations(permutations)
        if method is None:
            method = list(self.rankings)[0]
        if isinstance(relevance_rankings, RelevanceLibrary):
            library = relevance_rankings
            if dataset_disease_map is not None:
                library = RelevanceLibrary(
                    {d: library.get(d) for d in library.diseases}, dataset_disease_map
                )
        else:
            library = RelevanceLibrary(relevance_rankings, dataset_disease_map)
        rs = np.random.RandomState(self.seed)
        self.rand_omitted = {}
        self.rand_failures = {}
        rows = []
        for ds, ranking in self.rankings[method].items():
            try:
                rel = library.for_dataset(ds)
            except (UnknownDatasetError, UnknownDiseaseCodeError) as e:
                self._logger.warning("Dataset %s excluded: %s" % (ds, e))
                self.rand_omitted[ds] = str(e)
                continue
            try:
                obs = eval_relevance(ranking, rel)
                null = comp_rand(rel, ranking.terms, permutations=permutations, seed=rs)
                opt = comp_opt(rel, ranking.terms)
            except (GSEABenchError, ValueError) as e:
                reason = "%s: %s" % (type(e).__name__, e)
                self._logger.warning("Random relevance of %s failed: %s" % (ds, reason))
                self.rand_failures[ds] = reason
                rows.append((ds, np.nan, np.nan, np.nan, np.nan))
                continue
            rows.append(
                (ds, obs, opt, float(null.mean()), empirical_pvalue(obs, null))
            )
        df = pd.DataFrame(
            rows, columns=["Dataset", "Observed", "Optimal", "Random", "P-value"]
        ).set_index("Dataset")
        self._write_table(df, "random.%s" % method)
        return df
