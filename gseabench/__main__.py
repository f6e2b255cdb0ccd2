import argparse as ap
import sys

# ------------------------------------
# Main function
# ------------------------------------

__version__ = "0.3.0"


def main():
    """The Main function/pipeline for GSEAbench."""

    # Parse options...
    argparser = prepare_argparser()
    args = argparser.parse_args()
    subcommand = args.subcommand_name

    if subcommand == "relevance":
        from .aggregate import RelevanceAggregator
        from .parser import read_disease_map, read_relevance, read_results

        agg = RelevanceAggregator(
            read_results(args.indir, args.methods),
            read_relevance(args.rel),
            read_disease_map(args.map),
            outdir=args.outdir,
            strict=not args.lenient,
            verbose=args.verbose,
        )
        res = agg.run()
        table = res.as_percent() if args.percent else res.table
        print(table.to_csv(sep="\t", float_format="%.4f"), end="")
        for ds, reason in res.omitted.items():
            sys.stderr.write("omitted %s: %s\n" % (ds, reason))
        for (method, ds), reason in res.failures.items():
            sys.stderr.write("failed %s on %s: %s\n" % (method, ds, reason))

    elif subcommand == "rand":
        from .exceptions import InvalidPermutationCountError
        from .parser import read_ranking, read_relevance
        from .scoring import comp_opt, comp_rand, empirical_pvalue, eval_relevance

        ranking = read_ranking(args.rnk)
        rankings = read_relevance(args.rel)
        disease = args.disease if args.disease else list(rankings)[0]
        if disease not in rankings:
            argparser.error("Disease code %s not found in %s" % (disease, args.rel))
        rel = rankings[disease]
        obs = eval_relevance(ranking, rel)
        try:
            null = comp_rand(rel, ranking.terms, permutations=args.n, seed=args.seed)
        except InvalidPermutationCountError as e:
            argparser.error(str(e))
        print("observed\t%.4f" % obs)
        print("optimal\t%.4f" % comp_opt(rel, ranking.terms))
        print("random_mean\t%.4f" % null.mean())
        print("pvalue\t%.6g" % empirical_pvalue(obs, null))

    elif subcommand == "sigsets":
        from .parser import read_results
        from .stats import eval_nr_sig_sets

        df = eval_nr_sig_sets(
            read_results(args.indir, args.methods),
            alpha=args.alpha,
            padj=args.padj,
            perc=not args.count,
        )
        print(df.to_csv(sep="\t", float_format="%.4f"), end="")

    return


def prepare_argparser():
    """Prepare argparser object. New options will be added in this function first."""
    description = "%(prog)s -- Gene Set Enrichment Analysis benchmarking"
    epilog = "For command line options of each command, type: %(prog)s COMMAND -h"

    # top-level parser
    argparser = ap.ArgumentParser(description=description, epilog=epilog)
    argparser.add_argument(
        "--version", action="version", version="%(prog)s " + __version__
    )
    subparsers = argparser.add_subparsers(
        dest="subcommand_name"
    )  # help="sub-command help")
    subparsers.required = True

    # command for 'relevance'
    add_relevance_parser(subparsers)
    # command for 'rand'
    add_rand_parser(subparsers)
    # command for 'sigsets'
    add_sigsets_parser(subparsers)

    return argparser


def add_output_option(parser):
    """output option"""

    parser.add_argument(
        "-o",
        "--outdir",
        dest="outdir",
        type=str,
        default=None,
        metavar="",
        action="store",
        help="The GSEAbench output directory. Default: None, nothing is written",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=False,
        dest="verbose",
        help="Increase output verbosity, print out progress of your job",
    )


def add_results_input(group):
    group.add_argument(
        "-i",
        "--indir",
        dest="indir",
        action="store",
        type=str,
        required=True,
        help="Folder of saved rankings, one sub folder per method holding <dataset>.txt files.",
    )
    group.add_argument(
        "-m",
        "--methods",
        dest="methods",
        action="store",
        nargs="+",
        default=None,
        metavar="",
        help="Only evaluate these methods. Default: all sub folders of indir.",
    )


def add_relevance_parser(subparsers):
    """Add function 'relevance' argument parsers."""

    argparser_rel = subparsers.add_parser(
        "relevance", help="Phenotype relevance of saved rankings across datasets."
    )
    group_input = argparser_rel.add_argument_group("Input files arguments")
    add_results_input(group_input)
    group_input.add_argument(
        "-r",
        "--rel",
        dest="rel",
        action="store",
        type=str,
        required=True,
        help="Relevance ranking table, folder of <disease>.txt tables, or url.",
    )
    group_input.add_argument(
        "-d",
        "--map",
        dest="map",
        action="store",
        type=str,
        required=True,
        help="Two column file mapping dataset ids to disease codes.",
    )
    group_opt = argparser_rel.add_argument_group("Advanced arguments")
    group_opt.add_argument(
        "--percent",
        action="store_true",
        dest="percent",
        default=False,
        help="Report relevance in percent of the optimal score. Default: ratio.",
    )
    group_opt.add_argument(
        "--lenient",
        action="store_true",
        dest="lenient",
        default=False,
        help="Warn instead of failing when candidate gene sets do not match a ranking.",
    )
    add_output_option(argparser_rel)


def add_rand_parser(subparsers):
    """Add function 'rand' argument parsers."""

    argparser_rand = subparsers.add_parser(
        "rand", help="Compare the relevance of one ranking with random rankings."
    )
    group_input = argparser_rand.add_argument_group("Input files arguments")
    group_input.add_argument(
        "-k",
        "--rnk",
        dest="rnk",
        action="store",
        type=str,
        required=True,
        help="Ranking file, as saved by GSEAbench.",
    )
    group_input.add_argument(
        "-r",
        "--rel",
        dest="rel",
        action="store",
        type=str,
        required=True,
        help="Relevance ranking table, folder of <disease>.txt tables, or url.",
    )
    group_input.add_argument(
        "--disease",
        dest="disease",
        action="store",
        type=str,
        default=None,
        metavar="",
        help="Disease code of the relevance ranking. Default: the first one.",
    )
    group_opt = argparser_rand.add_argument_group("Advanced arguments")
    group_opt.add_argument(
        "-n",
        "--permu-num",
        dest="n",
        action="store",
        type=int,
        default=1000,
        metavar="nperm",
        help="Number of random permutations. Default: 1000",
    )
    group_opt.add_argument(
        "-s",
        "--seed",
        dest="seed",
        action="store",
        type=int,
        default=123,
        metavar="",
        help="Number of random seed. Default: 123",
    )


def add_sigsets_parser(subparsers):
    """Add function 'sigsets' argument parsers."""

    argparser_sig = subparsers.add_parser(
        "sigsets", help="Percentage of significant gene sets of saved rankings."
    )
    group_input = argparser_sig.add_argument_group("Input files arguments")
    add_results_input(group_input)
    group_opt = argparser_sig.add_argument_group("Advanced arguments")
    group_opt.add_argument(
        "-a",
        "--alpha",
        dest="alpha",
        action="store",
        type=float,
        default=0.05,
        metavar="",
        help="Significance level. Default: 0.05",
    )
    group_opt.add_argument(
        "--padj",
        dest="padj",
        action="store",
        type=str,
        choices=("BH", "bonferroni", "none"),
        default="BH",
        metavar="",
        help="Multiple testing correction, choose from {'BH', 'bonferroni', 'none'}. Default: BH",
    )
    group_opt.add_argument(
        "--count",
        action="store_true",
        dest="count",
        default=False,
        help="Report the number instead of the percentage of significant gene sets.",
    )


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        sys.stderr.write("User interrupted me! ;-) Bye!\n")
        sys.exit(0)
