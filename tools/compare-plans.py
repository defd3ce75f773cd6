#!/usr/bin/env python3

import argparse
import pathlib
import sys

import plancheck as pc
from plancheck import workloads


def read_explains(directory: pathlib.Path, *, explain_suffix: str) -> dict[str, tuple[str, str]]:
    explains = {}
    for query_file in directory.glob("*.sql"):
        explain_file = query_file.with_suffix(explain_suffix)
        if not explain_file.exists():
            print("No EXPLAIN output for query", query_file.stem, "- skipping", file=sys.stderr)
            continue
        with open(query_file, "r", encoding="utf-8") as raw_query:
            query_text = "".join(raw_query.readlines())
        with open(explain_file, "r", encoding="utf-8") as raw_explain:
            explain_text = "".join(raw_explain.readlines())
        explains[query_file.stem] = (query_text, explain_text)
    return explains


def main():
    parser = argparse.ArgumentParser(description="Utility to detect plan changes between two TiDB versions. Both "
                                     "directories have to contain one <label>.sql file per query along with the "
                                     "raw EXPLAIN output of that query.")
    parser.add_argument("baseline", action="store", help="Directory containing the reference plans.")
    parser.add_argument("candidate", action="store", help="Directory containing the plans to check.")
    parser.add_argument("--suffix", "-s", action="store", default=".txt",
                        help="File extension of the EXPLAIN output files ('.txt' per default).")
    parser.add_argument("--baseline-version", action="store", default=None,
                        help="TiDB version of the baseline plans. Inferred from each report by default.")
    parser.add_argument("--candidate-version", action="store", default=None,
                        help="TiDB version of the candidate plans. Inferred from each report by default.")
    parser.add_argument("--skip-errors", action="store_true", default=False,
                        help="Skip malformed EXPLAIN output instead of aborting.")
    parser.add_argument("--changed-only", action="store_true", default=False,
                        help="Only report queries whose plan changed.")
    parser.add_argument("--verbose", "-v", action="store_true", default=False, help="Print progress information.")
    parser.add_argument("--out", "-o", action="store", default=sys.stdout,
                        help="File to write results to (stdout by default).")

    args = parser.parse_args()

    baseline_explains = read_explains(pathlib.Path(args.baseline), explain_suffix=args.suffix)
    candidate_explains = read_explains(pathlib.Path(args.candidate), explain_suffix=args.suffix)

    try:
        baseline = workloads.parse_workload(baseline_explains, version=args.baseline_version,
                                            skip_errors=args.skip_errors, verbose=args.verbose)
        candidate = workloads.parse_workload(candidate_explains, version=args.candidate_version,
                                             skip_errors=args.skip_errors, verbose=args.verbose)
    except (pc.FormatError, pc.UnsupportedVersionError) as e:
        sys.exit(f"Could not parse workload: {e}")

    report = workloads.compare_workloads(baseline, candidate, verbose=args.verbose)
    if args.changed_only:
        report = report[~report[workloads.COL_SAME]]
    report.to_csv(args.out, index=False)


if __name__ == "__main__":
    main()
