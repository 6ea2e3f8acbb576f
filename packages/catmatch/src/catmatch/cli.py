"""CLI tool for catalog search, batch matching and evaluation."""

import argparse
import json
import sys

import pandas as pd
import structlog

from catmatch.config import MatchConfig
from catmatch.errors import CatmatchError
from catmatch.evaluation import evaluate, load_labeled_queries
from catmatch.io import build_response, read_catalog, read_requested_items, write_results
from catmatch.logging import LOG_FORMATS, configure_logging
from catmatch.matcher import ProductMatcher


def _non_negative_int(value: str) -> int:
    try:
        n = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid int value: {value!r}") from None
    if n < 0:
        raise argparse.ArgumentTypeError(f"must be >= 0, got {n}")
    return n


def _build_matcher(args: argparse.Namespace) -> ProductMatcher:
    log = structlog.get_logger()
    config = MatchConfig()
    if args.synonyms:
        config.synonyms_path = args.synonyms
    catalog = read_catalog(args.catalog)
    log.info("catalog_ready", path=args.catalog, count=len(catalog))
    return ProductMatcher(catalog, config)


def cmd_search(args: argparse.Namespace) -> None:
    matcher = _build_matcher(args)
    query = " ".join(args.query)
    results = matcher.match(query, top_k=args.top_k)
    if not results:
        print(f"No matches for: {query}")
        return

    rows = [
        {
            "rank": rank,
            "id": r.product.id,
            "name": r.product.name,
            "supplier": r.product.supplier,
            "score": round(r.score, 4),
            "confidence": f"{r.confidence:.2f}",
            "exact": ", ".join(r.match_details.exact_terms),
            "fuzzy": ", ".join(r.match_details.fuzzy_terms),
            "synonym": ", ".join(r.match_details.synonym_terms),
            "category": r.match_details.category_boost,
        }
        for rank, r in enumerate(results, start=1)
    ]
    print(pd.DataFrame(rows).to_string(index=False))


def cmd_match(args: argparse.Namespace) -> None:
    matcher = _build_matcher(args)
    parsed = read_requested_items(args.items)
    outcomes = matcher.match_items(parsed.items)

    if args.json:
        print(json.dumps(build_response(parsed, outcomes), indent=2, ensure_ascii=False))
    if args.show:
        _show_matches(outcomes)
    if args.output:
        write_results(outcomes, args.output)
        print(f"\nSaved to: {args.output}")

    _print_stats(matcher)


def _show_matches(outcomes: list) -> None:
    rows = [
        {
            "requested": o.requested_item.name,
            "qty": o.quantity,
            "matched": o.matched_product.name if o.matched_product else "-",
            "confidence": o.confidence,
        }
        for o in outcomes
        if o.ok
    ]
    if not rows:
        print("\n=== No items ===")
        return
    print(f"\n=== Matches ({len(rows)}) ===")
    print(pd.DataFrame(rows).to_string(index=False))


def _print_stats(matcher: ProductMatcher) -> None:
    s = matcher.stats
    print("\n--- Statistics ---")
    print(f"Catalog entries: {s.catalog_size}")
    print(f"Indexed terms: {s.terms}")
    print(f"Items: {s.items}")
    print(f"Matched: {s.matched}")
    print(f"No match: {s.no_match}")
    if s.invalid > 0:
        print(f"Invalid: {s.invalid}")
    print(f"Comparisons: {s.comparisons}")


def cmd_eval(args: argparse.Namespace) -> None:
    matcher = _build_matcher(args)
    queries = load_labeled_queries(args.labels)
    metrics = evaluate([], queries, k=args.k, matcher=matcher)

    print(f"Queries: {metrics.total}")
    print(f"Top-1 accuracy: {metrics.accuracy:.3f} ({metrics.top1_correct}/{metrics.total})")
    print(f"Recall@{args.k}: {metrics.recall_at_k:.3f}")
    print(f"MRR: {metrics.mrr:.3f}")
    print(f"No match: {metrics.no_match}")
    if metrics.misses:
        print("\nMisses:")
        for q in metrics.misses:
            print(f"  - {q}")


def main() -> None:
    parent_parser = argparse.ArgumentParser(add_help=False)
    parent_parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
        help="Set logging level (default: INFO)",
    )
    parent_parser.add_argument(
        "--log-format",
        choices=list(LOG_FORMATS),
        default="console",
        help="Log output format (default: console)",
    )
    parent_parser.add_argument("--catalog", required=True, help="Catalog file (.json or .csv)")
    parent_parser.add_argument("--synonyms", help="Override the bundled synonym table (JSON)")

    parser = argparse.ArgumentParser(description="Procurement catalog matching CLI")
    subparsers = parser.add_subparsers(dest="command", required=True)

    search_parser = subparsers.add_parser("search", parents=[parent_parser], help="Rank catalog entries for a query")
    search_parser.add_argument("query", nargs="+", help="Free-text query")
    search_parser.add_argument("--top-k", type=_non_negative_int, default=5, help="Number of results (default: 5)")
    search_parser.set_defaults(func=cmd_search)

    match_parser = subparsers.add_parser("match", parents=[parent_parser], help="Match a requested-item file")
    match_parser.add_argument("--items", required=True, help="Requested items (.csv, .xlsx or .txt)")
    match_parser.add_argument("--output", help="Output file (.jsonl, .csv or .xlsx)")
    match_parser.add_argument("--json", action="store_true", help="Print the JSON response payload")
    match_parser.add_argument("--show", action="store_true", help="Display matches on screen")
    match_parser.set_defaults(func=cmd_match)

    eval_parser = subparsers.add_parser("eval", parents=[parent_parser], help="Evaluate against labeled queries")
    eval_parser.add_argument("--labels", required=True, help="CSV with query,expected_id columns")
    eval_parser.add_argument("--k", type=_non_negative_int, default=5, help="Cutoff for recall@k (default: 5)")
    eval_parser.set_defaults(func=cmd_eval)

    args = parser.parse_args()
    configure_logging(args.log_level, args.log_format)
    try:
        args.func(args)
    except CatmatchError as e:
        structlog.get_logger().error("command_failed", command=args.command, error=str(e))
        sys.exit(1)


if __name__ == "__main__":
    main()
