# -*- coding: utf-8 -*-
import logging
import os
from typing import Dict, List, Mapping, Optional

import pandas as pd

from gseabench.ranking import KINDS, PVALUE, GeneSetRanking, RelevanceRanking
from gseabench.utils import DEFAULT_CACHE_PATH, mkdirs, retry

TABLE_SUFFIXES = (".txt", ".tsv", ".csv")


def _sep(path: str) -> str:
    return "," if path.lower().endswith(".csv") else "\t"


def _stem(path: str) -> str:
    return os.path.splitext(os.path.basename(path))[0]


def _list_tables(indir: str) -> List[str]:
    return sorted(
        os.path.join(indir, f)
        for f in os.listdir(indir)
        if f.lower().endswith(TABLE_SUFFIXES) and not f.startswith(".")
    )


def read_gmt(path: str) -> Dict[str, List[str]]:
    """Read GMT file

    :param str path: the path to a gmt file.
    :return: a dict object
    """
    if not path.lower().endswith("gmt"):
        raise ValueError("Please input a gmt file")
    genesets_dict = {}
    with open(path) as genesets:
        for line in genesets:
            entries = line.strip().split("\t")
            if len(entries) < 2:
                continue
            key = entries[0]
            genesets_dict[key] = [g.split(",")[0] for g in entries[2:] if g]
    return genesets_dict


def download_file(url: str, cache_dir: str = DEFAULT_CACHE_PATH) -> str:
    """Download a file once and return the local path of the cached copy."""
    mkdirs(cache_dir)
    outname = os.path.join(cache_dir, url.rstrip("/").split("/")[-1])
    if os.path.isfile(outname):
        logging.info("%s already downloaded in: %s, use local file" % (url, cache_dir))
        return outname
    s = retry(num=5)
    response = s.get(url, timeout=60)
    if not response.ok:
        raise Exception("Error fetching %s, status code: %s" % (url, response.status_code))
    with open(outname, "wb") as out:
        out.write(response.content)
    return outname


def read_relevance(
    path: str,
    id_col: str = "GENESET",
    score_col: str = "REL.SCORE",
    disease_col: str = "DISEASE",
    disease: Optional[str] = None,
) -> Dict[str, RelevanceRanking]:
    """Read curated relevance rankings.

    :param path: a table file, an http(s) url of a table file, or a folder of
                 table files named ``<disease code>.txt``.
    :param id_col: column of gene set ids. The first column if not found.
    :param score_col: column of relevance scores. The second column if not found.
    :param disease_col: optional column of disease codes, for one table holding
                        several diseases.
    :param disease: disease code of a single-disease file. Default: file name.
    :return: dict, disease code -> RelevanceRanking.
    """
    if path.startswith(("http://", "https://")):
        path = download_file(path)
    if os.path.isdir(path):
        rankings = {}
        for f in _list_tables(path):
            rankings.update(read_relevance(f, id_col, score_col, disease_col))
        if len(rankings) == 0:
            raise ValueError("No relevance tables found in %s" % path)
        return rankings

    df = pd.read_csv(path, sep=_sep(path), comment="#")
    if disease_col in df.columns:
        cols = [c for c in df.columns if c != disease_col]
        return {
            str(d): RelevanceRanking.from_frame(
                sub[cols], id_col=id_col, score_col=score_col, disease=str(d)
            )
            for d, sub in df.groupby(disease_col, sort=False)
        }
    disease = disease if disease is not None else _stem(path)
    return {
        disease: RelevanceRanking.from_frame(
            df, id_col=id_col, score_col=score_col, disease=disease
        )
    }


def read_disease_map(
    path: str, sep: Optional[str] = "\t", header: bool = False
) -> Dict[str, str]:
    """Read the dataset -> disease code map.

    One mapping per line, dataset id and disease code separated by ``sep``
    (any whitespace if None). Blank lines and lines starting with # are skipped.
    """
    mapping = {}
    skip_header = header
    with open(path) as inp:
        for i, line in enumerate(inp):
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            if skip_header:
                skip_header = False
                continue
            items = line.split(sep)
            if len(items) < 2:
                raise ValueError(
                    "Line %d of %s should have a dataset and a disease code" % (i + 1, path)
                )
            mapping[items[0].strip()] = items[1].strip()
    return mapping


def read_de_tables(path: str, index_col: int = 0) -> Dict[str, pd.DataFrame]:
    """Read one differential expression table per dataset from a folder.

    The file name (without extension) is the dataset id, the first column
    holds the gene ids.
    """
    tables = {}
    for f in _list_tables(path):
        tables[_stem(f)] = pd.read_csv(f, sep=_sep(f), index_col=index_col, comment="#")
    if len(tables) == 0:
        raise ValueError("No differential expression tables found in %s" % path)
    return tables


def write_ranking(ranking: GeneSetRanking, path: str):
    """Write a ranking as a tab separated table, kind in a leading comment."""
    with open(path, "w") as out:
        out.write("# kind=%s\n" % ranking.kind)
        ranking.to_frame().to_csv(out, sep="\t", index=False)


def read_ranking(path: str, kind: Optional[str] = None) -> GeneSetRanking:
    """Read a ranking written by :func:`write_ranking`, keeping its order."""
    with open(path) as inp:
        first = inp.readline().strip()
    if kind is None:
        kind = PVALUE
        if first.startswith("#") and "kind=" in first:
            kind = first.split("kind=")[-1].strip()
    if kind not in KINDS:
        raise ValueError("Unknown ranking kind in %s: %s" % (path, kind))
    df = pd.read_csv(path, sep="\t", skiprows=1 if first.startswith("#") else 0)
    if "Rank" in df.columns:
        df = df.sort_values("Rank", kind="mergesort")
    stats = df["Statistic"] if "Statistic" in df.columns else None
    return GeneSetRanking(df["Term"].astype(str), stats, kind=kind)


def write_results(rankings: Mapping[str, Mapping[str, GeneSetRanking]], outdir: str):
    """Save rankings as ``outdir/<method>/<dataset>.txt``."""
    for method, per_dataset in rankings.items():
        mdir = os.path.join(outdir, method)
        mkdirs(mdir)
        for dataset, ranking in per_dataset.items():
            write_ranking(ranking, os.path.join(mdir, "%s.txt" % dataset))


def read_results(
    indir: str, methods: Optional[List[str]] = None
) -> Dict[str, Dict[str, GeneSetRanking]]:
    """Read rankings saved by :func:`write_results`.

    :param methods: only read these methods. Default: every sub folder.
    :return: {method: {dataset: GeneSetRanking}}
    """
    if methods is None:
        methods = sorted(
            d for d in os.listdir(indir) if os.path.isdir(os.path.join(indir, d))
        )
    results = {}
    for method in methods:
        mdir = os.path.join(indir, method)
        if not os.path.isdir(mdir):
            raise ValueError("No results of method %s in %s" % (method, indir))
        results[method] = {_stem(f): read_ranking(f) for f in _list_tables(mdir)}
    return results
