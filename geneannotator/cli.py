from __future__ import annotations

import argparse
import logging
import re
import sys
from pathlib import Path
from typing import Optional

from . import __version__
from .api import annotate_tree
from .annotation.gene_event import BUCKET_KINDS
from .exceptions import ConfigurationError, GeneAnnotatorError
from .genes.gene_index import KeywordFilter, build_gene_index
from .genes.sites import sites_with_copy_number_change
from .substitution.model_variants import MODEL_SELECTORS, MODEL_VARIANTS
from .substitution.substitution_model import get_substitution_model
from .utils.io import (
    read_annovar_gene_map,
    read_gene_allowlist,
    read_gene_map,
    read_ternary_genotypes,
    read_tree,
    read_variant_sites,
)
from .utils.misc import separator_from_name

logger = logging.getLogger("geneannotator")

# Input files discovered in a results directory
TREE_PATTERN = r".+\.intermediate_tree$"
SITES_PATTERN = r".+\.loci_info$"
TERNARY_PATTERN = r".+\.ternary$"


def _setup_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG

    log_fmt = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
    logging.basicConfig(level=level, format=log_fmt, stream=sys.stderr)


def _path_exists(p: str) -> str:
    if not Path(p).exists():
        raise argparse.ArgumentTypeError(f"Path does not exist: {p}")
    return p


def _handle_error(err: Exception) -> int:
    sys.stderr.write(f"{err.__class__.__name__}: {err}\n")
    return 2


def find_input_file(directory: Path, pattern: str) -> str:
    """Return the single file in a directory whose name matches a pattern."""
    if not directory.is_dir():
        raise ConfigurationError(f"{directory} does not exist!")
    pat = re.compile(pattern)
    found = sorted(p for p in directory.iterdir() if pat.match(p.name))
    if len(found) != 1:
        raise ConfigurationError(
            f"Error! There should be 1 existing file in {directory} matching this pattern {pattern}, found {len(found)}"
        )
    return str(found[0])


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="geneannotator",
        description=(
            "Annotate the branches of a genotyped phylogenetic tree with the genes "
            "hit by mutation events, split into ISA and FSA events."
        ),
    )
    p.add_argument("--version", action="version", version=f"geneannotator {__version__}")

    inputs = p.add_argument_group("inputs")
    inputs.add_argument("--results-dir", help="Directory holding *.intermediate_tree, *.loci_info and *.ternary files; "
                                              "used for inputs not given explicitly.")
    inputs.add_argument("--tree", type=_path_exists, help="Tree with genotypes (Newick or Nexus).")
    inputs.add_argument("--sites", type=_path_exists, help="Variant sites: chr, pos, ref, alt1,alt2 per line.")
    inputs.add_argument("--map", required=True, type=_path_exists, help="Gene map (plain or ANNOVAR output).")

    genes = p.add_argument_group("gene map filtering")
    genes.add_argument("--annovar", choices=["tab", "comma"], default=None,
                       help="Gene map is ANNOVAR output with the given separator.")
    genes.add_argument("--annovar-filter-col", type=int, default=None,
                       help="ANNOVAR column (0-based) to filter records on.")
    genes.add_argument("--annovar-filter-keywords", default=None,
                       help="'f,kw1,kw2' for fixed keywords or 'r,re1,re2' for regular expressions.")
    genes.add_argument("--ternary", type=_path_exists,
                       help="Ternary genotypes; records holding a site with a copy number change survive the keyword filter.")
    genes.add_argument("--filter-genes", type=_path_exists, help="Table of genes to keep (first line is a header).")
    genes.add_argument("--filter-sep", choices=["tab", "comma"], default="tab", help="Separator of --filter-genes.")
    genes.add_argument("--filter-col", type=int, default=0, help="Gene column (0-based) of --filter-genes.")

    model = p.add_argument_group("model")
    selectors = [str(k) for k in MODEL_SELECTORS] + sorted(MODEL_VARIANTS)
    model.add_argument("--subst", default="0", choices=selectors,
                       help="Substitution model: 0 (mu_extended), 1 (mu_del) or a model name.")
    model.add_argument("--deletion-rate", type=float, default=0.0, help="Deletion rate for models with deletions.")

    out = p.add_argument_group("output")
    out.add_argument("--out", default="gene_annotation", help="Output prefix for <out>.{full,isa,fsa}.tsv.")
    out.add_argument("-v", "--verbose", action="count", default=0, help="Increase verbosity (-v, -vv).")
    return p


def _check_args(args: argparse.Namespace) -> None:
    if (args.annovar_filter_col is None) != (args.annovar_filter_keywords is None):
        raise ConfigurationError("--annovar-filter-col and --annovar-filter-keywords must be given together")
    if args.annovar_filter_col is not None and args.annovar is None:
        raise ConfigurationError("--annovar-filter-col and --annovar-filter-keywords require --annovar")
    if args.annovar_filter_col is not None and args.annovar_filter_col < 0:
        raise ConfigurationError("--annovar-filter-col must not be negative")
    if args.filter_col < 0:
        raise ConfigurationError("--filter-col must not be negative")

    results_dir = Path(args.results_dir).expanduser() if args.results_dir else None
    if args.tree is None:
        if results_dir is None:
            raise ConfigurationError("--tree is required without --results-dir")
        args.tree = find_input_file(results_dir, TREE_PATTERN)
    if args.sites is None:
        if results_dir is None:
            raise ConfigurationError("--sites is required without --results-dir")
        args.sites = find_input_file(results_dir, SITES_PATTERN)
    if args.annovar_filter_col is not None and args.ternary is None:
        if results_dir is None:
            raise ConfigurationError("--ternary is required with --annovar-filter-col unless --results-dir is given")
        args.ternary = find_input_file(results_dir, TERNARY_PATTERN)


def run(args: argparse.Namespace) -> int:
    _setup_logging(args.verbose)
    logger.info("geneannotator %s", __version__)

    try:
        _check_args(args)

        substitution_model = get_substitution_model(args.subst, args.deletion_rate)
        root = read_tree(args.tree)
        sites = read_variant_sites(args.sites)

        allowed_genes = None
        if args.filter_genes is not None:
            allowed_genes = read_gene_allowlist(args.filter_genes, separator_from_name(args.filter_sep), args.filter_col)

        keyword_filter = None
        sites_to_keep = None
        if args.annovar is not None:
            records = read_annovar_gene_map(args.map, separator_from_name(args.annovar), args.annovar_filter_col)
            if args.annovar_filter_col is not None:
                keyword_filter = KeywordFilter.parse(args.annovar_filter_col, args.annovar_filter_keywords)
                sites_to_keep = sites_with_copy_number_change(read_ternary_genotypes(args.ternary), sites)
                logger.info("%d variant sites carry copy number changes", len(sites_to_keep))
        else:
            records = read_gene_map(args.map)

        gene_index = build_gene_index(records, allowed_genes, keyword_filter, sites_to_keep)
        result = annotate_tree(root, sites, gene_index, model=substitution_model,
                               verbose=args.verbose > 0)

        out_prefix = Path(args.out).expanduser()
        if out_prefix.parent != Path("."):
            out_prefix.parent.mkdir(parents=True, exist_ok=True)
        for kind in BUCKET_KINDS:
            out_path = f"{out_prefix}.{kind}.tsv"
            result.to_df(kind).to_csv(out_path, sep="\t", index=False)
            logger.info("Wrote %s", out_path)
    except (GeneAnnotatorError, ValueError, OSError) as err:
        return _handle_error(err)

    print("Successful!")
    print(f"Gene annotations have been saved to {out_prefix}.{{{','.join(BUCKET_KINDS)}}}.tsv")
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    return run(args)


if __name__ == "__main__":
    raise SystemExit(main())
