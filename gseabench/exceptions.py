# -*- coding: utf-8 -*-
"""Errors raised by the relevance scoring functions.

All of them are local validation errors: they are raised where the bad input
is detected and are never retried. Callers running a whole benchmark
(:class:`gseabench.aggregate.RelevanceAggregator`, :class:`gseabench.benchmark.Benchmark`)
decide whether to skip the offending method/dataset pair.
"""


class GSEABenchError(Exception):
    """base class of all gseabench errors"""


class EmptyRankingError(GSEABenchError, ValueError):
    """An empty gene set ranking was given where at least one entry is needed."""


class UnknownDiseaseCodeError(GSEABenchError, LookupError):
    """No relevance ranking is available for a disease code."""

    def __init__(self, disease):
        self.disease = disease
        super().__init__("No relevance ranking for disease code: %s" % disease)


class UnknownDatasetError(GSEABenchError, LookupError):
    """A dataset has no disease code in the dataset -> disease map."""

    def __init__(self, dataset):
        self.dataset = dataset
        super().__init__("No disease code mapped for dataset: %s" % dataset)


class InvalidPermutationCountError(GSEABenchError, ValueError):
    """Number of permutations must be a positive integer."""


class InconsistentCandidateSetError(GSEABenchError, ValueError):
    """Candidate gene sets differ from the gene sets of the ranking."""
