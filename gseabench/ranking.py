# -*- coding: utf-8 -*-

from collections.abc import Mapping
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd

from gseabench.exceptions import (
    EmptyRankingError,
    UnknownDatasetError,
    UnknownDiseaseCodeError,
)

PVALUE = "pvalue"
SCORE = "score"
KINDS = (PVALUE, SCORE)


class GeneSetRanking(object):
    """Ordered gene sets as produced by an enrichment method.

    Position 1 is the most enriched gene set. The ``kind`` tells how the
    statistic orders the gene sets: ``"pvalue"`` (ascending is better) or
    ``"score"`` (descending is better). Instances are read only.
    """

    def __init__(
        self,
        terms: Sequence[str],
        statistics: Optional[Sequence[float]] = None,
        kind: str = PVALUE,
    ):
        if kind not in KINDS:
            raise ValueError("kind should be one of %s, got %s" % (KINDS, kind))
        terms = tuple(str(t) for t in terms)
        if statistics is None:
            statistics = np.full(len(terms), np.nan)
        statistics = np.array(statistics, dtype=float)
        if statistics.shape != (len(terms),):
            raise ValueError("terms and statistics must have the same length")
        if len(set(terms)) != len(terms):
            raise ValueError("Gene set ranking contains duplicated terms")
        statistics.setflags(write=False)
        self._terms = terms
        self._stats = statistics
        self._index = None
        self.kind = kind

    @classmethod
    def from_records(
        cls, records: Iterable[Tuple[str, float]], kind: str = PVALUE
    ) -> "GeneSetRanking":
        """Rank (term, statistic) records by their statistic.

        Sorting is stable, so gene sets with tied statistics keep their input
        order. NaN statistics are ranked last. When a term occurs more than
        once only its best ranked entry is kept.
        """
        if kind not in KINDS:
            raise ValueError("kind should be one of %s, got %s" % (KINDS, kind))
        records = list(records)
        terms = [str(r[0]) for r in records]
        stats = np.array([r[1] for r in records], dtype=float)
        key = stats if kind == PVALUE else -stats
        order = np.argsort(key, kind="stable")
        seen = set()
        keep = []
        for i in order:
            if terms[i] in seen:
                continue
            seen.add(terms[i])
            keep.append(i)
        return cls([terms[i] for i in keep], stats[keep], kind=kind)

    @classmethod
    def from_frame(
        cls,
        df: pd.DataFrame,
        term_col: str = "Term",
        stat_col: Optional[str] = None,
        kind: str = PVALUE,
    ) -> "GeneSetRanking":
        """Rank the rows of an enrichment result table, e.g. gseapy's ``res2d``."""
        if stat_col is None:
            others = [c for c in df.columns if c != term_col]
            if len(others) == 0:
                raise ValueError("Could not find a statistic column")
            stat_col = others[0]
        stats = pd.to_numeric(df[stat_col], errors="coerce")
        return cls.from_records(zip(df[term_col].astype(str), stats), kind=kind)

    @property
    def terms(self) -> Tuple[str, ...]:
        return self._terms

    @property
    def statistics(self) -> np.ndarray:
        return self._stats

    def __len__(self):
        return len(self._terms)

    def __iter__(self):
        return iter(zip(self._terms, self._stats.tolist()))

    def __contains__(self, term):
        return term in self._rank_index()

    def __eq__(self, other):
        if not isinstance(other, GeneSetRanking):
            return NotImplemented
        return (
            self.kind == other.kind
            and self._terms == other._terms
            and np.array_equal(self._stats, other._stats, equal_nan=True)
        )

    def __repr__(self):
        head = ", ".join(self._terms[:3])
        if len(self) > 3:
            head += ", ..."
        return "GeneSetRanking(%d %s: [%s])" % (len(self), self.kind, head)

    def _rank_index(self) -> Dict[str, int]:
        if self._index is None:
            self._index = {t: i + 1 for i, t in enumerate(self._terms)}
        return self._index

    def rank_of(self, term: str) -> int:
        """1-based rank of a term"""
        return self._rank_index()[term]

    def is_empty(self):
        return len(self) == 0

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame(
            {
                "Term": list(self._terms),
                "Statistic": self._stats,
                "Rank": np.arange(1, len(self) + 1),
            }
        )


def rank_weights(ranking: Union[int, GeneSetRanking, Sequence]) -> np.ndarray:
    """Linear weights of the rank positions.

    A ranking of n gene sets gets ``n - r + 1`` for rank r, so the top gene
    set has the largest weight n and the last one weight 1.

    :param ranking: ranking size, or a ranking itself.
    :return: float array of length n.
    """
    n = ranking if isinstance(ranking, (int, np.integer)) else len(ranking)
    if n < 1:
        raise EmptyRankingError("Gene set ranking must not be empty")
    return np.arange(n, 0, -1, dtype=float)


class RelevanceRanking(Mapping):
    """Gene set -> relevance score for one disease.

    Iterates gene sets in descending relevance (stable on ties), which is
    the order of the theoretically optimal ranking.
    """

    def __init__(
        self,
        scores: Union[Mapping, pd.Series, Iterable[Tuple[str, float]]],
        disease: Optional[str] = None,
    ):
        if isinstance(scores, pd.Series):
            s = scores.copy()
        elif isinstance(scores, Mapping):
            s = pd.Series(dict(scores), dtype=float)
        else:
            pairs = list(scores)
            s = pd.Series(
                [p[1] for p in pairs], index=[p[0] for p in pairs], dtype=float
            )
        s = pd.to_numeric(s, errors="coerce").astype(float)
        s.index = s.index.astype(str)
        if s.isnull().any():
            raise ValueError("Relevance scores contain missing values")
        if (s < 0).any():
            raise ValueError("Relevance scores must be non-negative")
        s = s[~s.index.duplicated(keep="first")]
        s = s.sort_values(ascending=False, kind="mergesort")
        self._scores = dict(zip(s.index, s.values.tolist()))
        self.disease = disease

    @classmethod
    def from_frame(
        cls,
        df: pd.DataFrame,
        id_col: str = "GENESET",
        score_col: str = "REL.SCORE",
        disease: Optional[str] = None,
    ) -> "RelevanceRanking":
        if id_col not in df.columns or score_col not in df.columns:
            id_col, score_col = df.columns[:2]
        return cls(pd.Series(df[score_col].values, index=df[id_col]), disease=disease)

    def __getitem__(self, term):
        return self._scores[term]

    def __iter__(self):
        return iter(self._scores)

    def __len__(self):
        return len(self._scores)

    def __repr__(self):
        return "RelevanceRanking(disease=%s, %d gene sets)" % (self.disease, len(self))

    def to_series(self) -> pd.Series:
        return pd.Series(self._scores, dtype=float, name=self.disease)


class RelevanceLibrary(object):
    """Relevance rankings keyed by disease code, plus the dataset -> disease map."""

    def __init__(
        self,
        rankings: Mapping,
        dataset_map: Optional[Mapping[str, str]] = None,
    ):
        self._rankings = {}
        for disease, rel in rankings.items():
            if not isinstance(rel, RelevanceRanking):
                rel = RelevanceRanking(rel, disease=disease)
            elif rel.disease is None:
                rel = RelevanceRanking(rel.to_series(), disease=disease)
            self._rankings[disease] = rel
        self.dataset_map = dict(dataset_map) if dataset_map is not None else {}

    @property
    def diseases(self) -> List[str]:
        return list(self._rankings)

    def __contains__(self, disease):
        return disease in self._rankings

    def __len__(self):
        return len(self._rankings)

    def get(self, disease: str) -> RelevanceRanking:
        try:
            return self._rankings[disease]
        except KeyError:
            raise UnknownDiseaseCodeError(disease) from None

    def disease_of(self, dataset: str) -> str:
        try:
            return self.dataset_map[dataset]
        except KeyError:
            raise UnknownDatasetError(dataset) from None

    def for_dataset(self, dataset: str) -> RelevanceRanking:
        return self.get(self.disease_of(dataset))
