import warnings
from typing import Dict, List, Mapping, Optional, Sequence, Union

import pandas as pd

from .__main__ import __version__
from .aggregate import AggregatedResult, RelevanceAggregator
from .benchmark import Benchmark
from .exceptions import (
    EmptyRankingError,
    GSEABenchError,
    InconsistentCandidateSetError,
    InvalidPermutationCountError,
    UnknownDatasetError,
    UnknownDiseaseCodeError,
)
from .methods import available_methods, get_method, register_method
from .parser import (
    read_de_tables,
    read_disease_map,
    read_gmt,
    read_ranking,
    read_relevance,
    read_results,
    write_ranking,
    write_results,
)
from .ranking import GeneSetRanking, RelevanceLibrary, RelevanceRanking, rank_weights
from .scoring import (
    check_candidates,
    comp_opt,
    comp_rand,
    empirical_pvalue,
    eval_relevance,
    normalized_relevance,
)
from .stats import eval_nr_sig_sets


def relevance(
    method_rankings: Mapping[str, Mapping[str, GeneSetRanking]],
    relevance_rankings: Union[str, Mapping],
    dataset_disease_map: Union[str, Mapping[str, str]],
    outdir: Optional[str] = None,
    strict: bool = True,
    verbose: bool = False,
) -> RelevanceAggregator:
    """Phenotype relevance of enrichment methods across datasets.

    :param method_rankings: {method: {dataset: GeneSetRanking}}, e.g. ``Benchmark.rankings``
                            or the output of :func:`read_results`.

    :param relevance_rankings: {disease code: RelevanceRanking or dict}, or a path/url
                               read by :func:`read_relevance`.

    :param dataset_disease_map: {dataset: disease code}, or a two column file.

    :param str outdir: Results output directory. If None, nothing will write to disk.

    :param bool strict: Fail (instead of warn) when candidate gene sets don't match a ranking.

    :param bool verbose: Bool, increase output verbosity, print out progress of your job, Default: False.

    :return: Return a RelevanceAggregator obj. Results are stored in obj.results, an
             :class:`AggregatedResult`, where::

                 | table: observed / optimal score, datasets x methods,
                 | observed: relevance score of the method's ranking,
                 | optimal: relevance score of the optimal ranking,
                 | omitted: datasets without relevance ranking, and why,
                 | failures: (method, dataset) pairs that could not be scored.

    """
    if isinstance(relevance_rankings, str):
        relevance_rankings = read_relevance(relevance_rankings)
    if isinstance(dataset_disease_map, str):
        dataset_disease_map = read_disease_map(dataset_disease_map)
    agg = RelevanceAggregator(
        method_rankings,
        relevance_rankings,
        dataset_disease_map,
        outdir=outdir,
        strict=strict,
        verbose=verbose,
    )
    agg.run()
    return agg


def benchmark(
    datasets: Union[str, Mapping[str, pd.DataFrame]],
    gene_sets: Union[str, Dict[str, List[str]]],
    methods: Sequence = ("ora",),
    outdir: Optional[str] = None,
    threads: int = 1,
    seed: int = 123,
    verbose: bool = False,
    **kwargs,
) -> Benchmark:
    """Run enrichment methods on a compendium of datasets.

    :param datasets: {dataset: differential expression table}, or a folder of tables.

    :param gene_sets: .gmt gene sets file or dict of gene sets.

    :param methods: names of registered methods, see :func:`available_methods`, or callables.

    :param str outdir: Results output directory. If None, nothing will write to disk.

    :param int threads: Number of datasets processed in parallel. Default: 1.

    :param seed: Random seed of the randomization tests. Default: 123.

    :param bool verbose: Bool, increase output verbosity, print out progress of your job, Default: False.

    :param kwargs: passed on to each enrichment method.

    :return: Return a Benchmark obj, with rankings and runtimes of each method and dataset.
    """
    if "processes" in kwargs:
        warnings.warn("processes is deprecated; use threads", DeprecationWarning, 2)
        threads = kwargs.pop("processes")
    bench = Benchmark(
        datasets,
        gene_sets,
        methods=methods,
        outdir=outdir,
        threads=threads,
        seed=seed,
        verbose=verbose,
    )
    bench.run_ea(**kwargs)
    return bench


__all__ = [
    "AggregatedResult",
    "Benchmark",
    "EmptyRankingError",
    "GSEABenchError",
    "GeneSetRanking",
    "InconsistentCandidateSetError",
    "InvalidPermutationCountError",
    "RelevanceAggregator",
    "RelevanceLibrary",
    "RelevanceRanking",
    "UnknownDatasetError",
    "UnknownDiseaseCodeError",
    "available_methods",
    "benchmark",
    "check_candidates",
    "comp_opt",
    "comp_rand",
    "empirical_pvalue",
    "eval_nr_sig_sets",
    "eval_relevance",
    "get_method",
    "normalized_relevance",
    "rank_weights",
    "read_de_tables",
    "read_disease_map",
    "read_gmt",
    "read_ranking",
    "read_relevance",
    "read_results",
    "register_method",
    "relevance",
    "write_ranking",
    "write_results",
]
