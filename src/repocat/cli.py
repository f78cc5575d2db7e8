# src/repocat/cli.py
import sys
import argparse
import os
from pathlib import Path
from typing import List, Optional

# Module imports
from repocat.config import DEFAULT_WORKERS
from repocat.core.aggregator import aggregate, resolve_root
from repocat.errors import RepocatError
from repocat.models import AggregationResult, BinaryPolicy, OutputTarget
from repocat.utils.tokenizer import Tokenizer

def create_arg_parser():
    parser = argparse.ArgumentParser(
        prog="repocat",
        description="Concatenate a repository's files into a single text document with path markers and a line count."
    )
    parser.add_argument("root_dir", type=str, nargs="?", default=os.getcwd(), help="Project root directory")

    parser.add_argument(
        "--include",
        action="append",
        default=[],
        metavar="GLOB",
        help="Only aggregate files matching this glob (repeatable; default: all files)"
    )
    parser.add_argument(
        "--exclude",
        action="append",
        default=[],
        metavar="GLOB",
        help="Drop files matching this glob, even if included (repeatable)"
    )
    parser.add_argument(
        "--exclude-from",
        action="append",
        default=[],
        metavar="FILE",
        help="Read gitignore-style exclude patterns from FILE (repeatable)"
    )
    parser.add_argument(
        "-o", "--output",
        type=str,
        default=None,
        help="Output file (default: write the document to stdout)"
    )
    parser.add_argument("--stdout", action="store_true", help="Also print the document to stdout when --output is set")
    parser.add_argument(
        "--no-default-ignores",
        action="store_true",
        help="Do not skip version-control metadata directories (.git, .hg, .svn, ...)"
    )
    parser.add_argument(
        "--binary",
        choices=[p.value for p in BinaryPolicy],
        default=BinaryPolicy.SKIP.value,
        help="Non-text files: 'skip' omits them, 'flag' emits a placeholder block (default: skip)"
    )
    parser.add_argument("--tree", action="store_true", help="Prepend a project tree of the emitted files")
    parser.add_argument("--workers", type=int, default=DEFAULT_WORKERS, help=f"Parallel file readers (default: {DEFAULT_WORKERS})")
    parser.add_argument("--timeout", type=float, default=None, help="Abort if aggregation takes longer than SECONDS")
    parser.add_argument("--stats", action="store_true", help="Print line/token statistics and the largest files")
    parser.add_argument("-q", "--quiet", action="store_true", help="Only print errors")
    return parser

def print_stats(result: AggregationResult, out) -> None:
    """Prints the file/line/token summary and the ten largest files by tokens."""
    ranked = sorted(
        ((Tokenizer.count(e.content), e.line_count, e.rel_path) for e in result.text_entries),
        key=lambda row: (-row[0], row[2]),
    )
    total_tokens = sum(row[0] for row in ranked)

    print("\n--- Top 10 Largest Files (Est. Tokens) ---", file=out)
    print(f"{'Rank':<5} | {'Tokens':<10} | {'Lines':<8} | {'File Path'}", file=out)
    print("-" * 60, file=out)
    for i, (tokens, lines, rel_path) in enumerate(ranked[:10]):
        print(f"{i+1:<5} | {tokens:<10} | {lines:<8} | {rel_path}", file=out)
    print("-" * 60, file=out)
    print(f"Total files: {len(ranked)}", file=out)
    print(f"Total lines: {result.total_lines}", file=out)
    print(f"Total tokens: {total_tokens}", file=out)
    print("-" * 60, file=out)

def main(argv: Optional[List[str]] = None):
    try:
        # 1. Setup
        parser = create_arg_parser()
        args = parser.parse_args(argv)

        # The document owns stdout when it is printed there
        to_stdout = args.output is None or args.stdout
        status_out = sys.stderr if to_stdout else sys.stdout

        def say(message: str = "") -> None:
            if not args.quiet:
                print(message, file=status_out)

        root_dir = resolve_root(args.root_dir)
        output_file = Path(args.output).resolve() if args.output else None

        say("--- repocat ---")
        say(f"Scanning: {root_dir}")
        say(f"Output:   {output_file if output_file else '<stdout>'}")
        if args.include:
            say(f"Include:  {', '.join(args.include)}")
        if args.exclude:
            say(f"Exclude:  {', '.join(args.exclude)}")

        # 2. Aggregate and write
        target = OutputTarget(
            path=output_file,
            stream=sys.stdout if to_stdout else None,
        )
        result = aggregate(
            root_dir,
            include=args.include,
            exclude=args.exclude,
            output=target,
            binary_policy=BinaryPolicy(args.binary),
            use_default_ignores=not args.no_default_ignores,
            exclude_files=args.exclude_from,
            workers=args.workers,
            timeout=args.timeout,
            with_tree=args.tree,
        )

        # 3. Report
        if not args.quiet:
            flagged = {e.rel_path for e in result.entries if e.is_binary}
            for skipped in result.skipped:
                action = "Flagging" if skipped.rel_path in flagged else "Skipping"
                print(f"  > [Warning] {action} {skipped.rel_path} ({skipped.reason})", file=sys.stderr)

        if result.is_empty:
            say("No matching files found. Check your --include/--exclude globs.")

        if args.stats:
            print_stats(result, status_out)

        if output_file:
            say(f"\nSuccess! {len(result.text_entries)} files, {result.total_lines} lines written to: {output_file}")

    except RepocatError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    except KeyboardInterrupt:
        print("\nCancelled.", file=sys.stderr)
        sys.exit(1)

    except Exception as e:
        print(f"An unexpected error occurred: {e}", file=sys.stderr)
        sys.exit(1)

if __name__ == "__main__":
    main()
