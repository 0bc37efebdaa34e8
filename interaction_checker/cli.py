# cli.py
"""
Run the label interaction check from a terminal.

    python -m interaction_checker.cli Warfarin Aspirin
    python -m interaction_checker.cli Warfarin Aspirin Ibuprofen --output findings.csv

Findings are printed as JSON. With --output they are also written as a CSV
(one row per pair: drug_a, drug_b, severity, description).
"""

import argparse
import json
import logging
import os
import sys
from typing import List, Optional

import pandas as pd

from interaction_checker.config import load_settings
from interaction_checker.models import InteractionFinding
from interaction_checker.services.interactions import InteractionChecker, clean_drug_names
from interaction_checker.services.openfda import LabelFetchError, OpenFDAClient
from interaction_checker.services.rxnorm import RxNormClient


def findings_frame(findings: List[InteractionFinding]) -> pd.DataFrame:
    rows = [
        {
            "drug_a": f.pair[0],
            "drug_b": f.pair[1],
            "severity": f.severity,
            "description": f.description,
        }
        for f in findings
    ]
    return pd.DataFrame(rows, columns=["drug_a", "drug_b", "severity", "description"])


def main(argv: Optional[List[str]] = None, checker: Optional[InteractionChecker] = None) -> int:
    parser = argparse.ArgumentParser(description="Check drug names for interactions mentioned in FDA labels.")
    parser.add_argument("drugs", nargs="*", help="Drug names (at least two)")
    parser.add_argument("--output", default=None, help="Path to write findings as CSV")
    args = parser.parse_args(argv)

    drugs = clean_drug_names(args.drugs)
    if len(drugs) < 2:
        print("Please provide at least two non-empty drug names.", file=sys.stderr)
        return 2

    if checker is None:
        settings = load_settings()
        logging.basicConfig(level=settings.log_level)
        checker = InteractionChecker(
            RxNormClient(base_url=settings.rxnorm_base_url, timeout=settings.http_timeout),
            OpenFDAClient(
                label_url=settings.openfda_label_url,
                api_key=settings.openfda_api_key,
                limit=settings.openfda_label_limit,
                timeout=settings.http_timeout,
            ),
        )

    try:
        findings = checker.check(drugs)
    except LabelFetchError as exc:
        print(f"OpenFDA API Error ({exc.code}): {exc.message}", file=sys.stderr)
        return 1

    print(json.dumps({"interactions": [f.model_dump(exclude_none=True) for f in findings]}, indent=2))

    if args.output:
        out_dir = os.path.dirname(args.output)
        if out_dir:
            os.makedirs(out_dir, exist_ok=True)
        findings_frame(findings).to_csv(args.output, index=False)
        print(f"✅ Wrote {len(findings)} findings to: {args.output}", file=sys.stderr)

    return 0


if __name__ == "__main__":
    sys.exit(main())
