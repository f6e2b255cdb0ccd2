# -*- coding: utf-8 -*-

from collections.abc import Mapping
from typing import Dict, Iterable, List, Optional, Tuple

import numpy as np
import pandas as pd

from gseabench.base import BenchmarkBase
from gseabench.exceptions import (
    GSEABenchError,
    UnknownDatasetError,
    UnknownDiseaseCodeError,
)
from gseabench.ranking import GeneSetRanking, RelevanceLibrary
from gseabench.scoring import _terms, check_candidates, comp_opt, eval_relevance
from gseabench.utils import unique


def _melt(df: pd.DataFrame, name: str) -> pd.DataFrame:
    df = df.copy()
    df.index.name = "Dataset"
    df.columns.name = None
    return df.reset_index().melt(id_vars="Dataset", var_name="Method", value_name=name)


class AggregatedResult(object):
    """Relevance of each method on each dataset.

    ``observed`` and ``optimal`` are datasets x methods tables of raw scores,
    ``table`` is their ratio. ``omitted`` maps datasets left out for all
    methods to the reason, ``failures`` maps (method, dataset) pairs that
    could not be scored to the error message.
    """

    def __init__(
        self,
        observed: pd.DataFrame,
        optimal: pd.DataFrame,
        omitted: Optional[Dict[str, str]] = None,
        failures: Optional[Dict[Tuple[str, str], str]] = None,
    ):
        self.observed = observed
        self.optimal = optimal
        self.omitted = dict(omitted) if omitted else {}
        self.failures = dict(failures) if failures else {}

    @property
    def table(self) -> pd.DataFrame:
        return self.observed / self.optimal.where(self.optimal > 0)

    @property
    def methods(self) -> List[str]:
        return list(self.observed.columns)

    @property
    def datasets(self) -> List[str]:
        return list(self.observed.index)

    def as_percent(self) -> pd.DataFrame:
        """relevance in % of the optimal score"""
        return self.table * 100

    def to_long(self) -> pd.DataFrame:
        """one row per method and dataset, for plotting"""
        df = _melt(self.observed, "Observed")
        df["Optimal"] = _melt(self.optimal, "Optimal")["Optimal"].values
        df["Relevance"] = _melt(self.table, "Relevance")["Relevance"].values
        return df[["Method", "Dataset", "Observed", "Optimal", "Relevance"]]

    def omission_report(self) -> pd.DataFrame:
        rows = [(ds, "", "omitted", reason) for ds, reason in self.omitted.items()]
        rows += [(ds, m, "failed", msg) for (m, ds), msg in self.failures.items()]
        return pd.DataFrame(rows, columns=["Dataset", "Method", "Status", "Reason"])

    def __repr__(self):
        return "AggregatedResult(%d methods x %d datasets, %d omitted, %d failed)" % (
            len(self.methods),
            len(self.datasets),
            len(self.omitted),
            len(self.failures),
        )


class RelevanceAggregator(BenchmarkBase):
    """Phenotype relevance of enrichment methods across datasets."""

    def __init__(
        self,
        method_rankings: Mapping,
        relevance_rankings: Mapping,
        dataset_disease_map: Optional[Mapping[str, str]] = None,
        candidates: Optional[Mapping[str, Iterable[str]]] = None,
        outdir: Optional[str] = None,
        strict: bool = True,
        verbose: bool = False,
    ):
        super(RelevanceAggregator, self).__init__(
            outdir=outdir, module="relevance", threads=1, verbose=verbose
        )
        self.method_rankings = method_rankings
        if isinstance(relevance_rankings, RelevanceLibrary):
            if dataset_disease_map is None:
                dataset_disease_map = relevance_rankings.dataset_map
            relevance_rankings = {
                d: relevance_rankings.get(d) for d in relevance_rankings.diseases
            }
        self.library = RelevanceLibrary(relevance_rankings, dataset_disease_map)
        self.candidates = candidates if candidates is not None else {}
        self.strict = strict
        self.results = None
        self.res2d = None

    def _datasets(self) -> List[str]:
        datasets = []
        for per_dataset in self.method_rankings.values():
            datasets.extend(per_dataset.keys())
        return unique(datasets)

    def _resolve(self, datasets: List[str]):
        """relevance ranking of each dataset, unresolved datasets are omitted"""
        resolved, omitted = {}, {}
        for ds in datasets:
            try:
                resolved[ds] = self.library.for_dataset(ds)
            except (UnknownDatasetError, UnknownDiseaseCodeError) as e:
                omitted[ds] = str(e)
                self._logger.warning("Dataset %s excluded: %s" % (ds, e))
        return resolved, omitted

    def _score(self, ranking, relevance, dataset: str) -> Tuple[float, float]:
        if not isinstance(ranking, GeneSetRanking):
            ranking = GeneSetRanking(_terms(ranking))
        cands = self.candidates.get(dataset)
        if cands is None:
            cands = ranking.terms
        else:
            check_candidates(ranking, cands, strict=self.strict)
        return eval_relevance(ranking, relevance), comp_opt(relevance, cands)

    def run(self) -> AggregatedResult:
        """score every (method, dataset) pair and normalize by the optimum"""
        datasets = self._datasets()
        resolved, omitted = self._resolve(datasets)
        kept = [ds for ds in datasets if ds in resolved]
        methods = list(self.method_rankings.keys())
        observed = pd.DataFrame(np.nan, index=kept, columns=methods, dtype=float)
        optimal = pd.DataFrame(np.nan, index=kept, columns=methods, dtype=float)
        failures = {}
        for method, per_dataset in self.method_rankings.items():
            for ds in kept:
                if ds not in per_dataset:
                    failures[(method, ds)] = "No ranking for dataset %s" % ds
                    continue
                try:
                    obs, opt = self._score(per_dataset[ds], resolved[ds], ds)
                except (GSEABenchError, ValueError) as e:
                    failures[(method, ds)] = "%s: %s" % (type(e).__name__, e)
                    self._logger.error(
                        "Could not score %s on %s: %s" % (method, ds, e)
                    )
                    continue
                observed.loc[ds, method] = obs
                optimal.loc[ds, method] = opt
                if opt == 0:
                    failures[(method, ds)] = (
                        "Optimal score is 0: no tested gene set is relevant "
                        "for disease %s" % resolved[ds].disease
                    )
                    self._logger.warning(failures[(method, ds)])
                self._logger.debug(
                    "%s on %s: observed %.4g, optimal %.4g" % (method, ds, obs, opt)
                )
        observed.index.name = optimal.index.name = "Dataset"
        self.results = AggregatedResult(observed, optimal, omitted, failures)
        self.res2d = self.results.table
        self._logger.info(repr(self.results))
        self._write_table(self.res2d, "ratio")
        self._write_table(self.results.to_long(), "scores", index=False)
        if omitted or failures:
            self._write_table(self.results.omission_report(), "omitted", index=False)
        return self.results
