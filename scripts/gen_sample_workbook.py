#!/usr/bin/env python3
"""Sample dataset generator for the sheet annotator.

Generates an "uploaded" feature workbook plus a matching results JSON:
- Sheet 1: cover sheet (ignored by the annotator)
- Sheet 2: feature table with a few leading blank rows, a header row
  ("Sr No", "Feature", "Description", ...) and one row per feature
- results JSON: a COMPLETED status payload with one result item per feature

Some features can be dropped from the results and some index cells blanked
to exercise name / positional matching.
"""
from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any

import numpy as np
import pandas as pd

DEPARTMENT_TAGS = ["frontend", "backend", "mobile", "htmlCss", "aiMl"]
FEATURE_WORDS = ["Login", "Signup", "Dashboard", "Reports", "Billing", "Search", "Profile", "Chat", "Upload", "Export"]


def generate_features(rows: int, seed: int = 42) -> pd.DataFrame:
    """Feature table as it would appear in an uploaded sheet."""
    rng = np.random.default_rng(seed)
    names = [f"{FEATURE_WORDS[j % len(FEATURE_WORDS)]} {j // len(FEATURE_WORDS) + 1}" for j in range(rows)]
    return pd.DataFrame(
        {
            "Sr No": list(range(1, rows + 1)),
            "Feature": names,
            "Description": [f"Description for {n}" for n in names],
            "Priority": rng.choice(["P1", "P2", "P3"], rows).tolist(),
        }
    )


def generate_results(features: pd.DataFrame, seed: int = 42, drop_ratio: float = 0.0) -> dict[str, Any]:
    """COMPLETED status payload with one result item per kept feature."""
    rng = np.random.default_rng(seed + 1)
    items: list[dict[str, Any]] = []
    for _, row in features.iterrows():
        if drop_ratio and rng.random() < drop_ratio:
            continue
        item: dict[str, Any] = {
            "featureIndex": int(row["Sr No"]),
            "featureName": row["Feature"],
            "batch": f"Batch {int(row['Sr No']) // 25 + 1}",
            "confidence": str(rng.choice(["Low", "Medium", "High"])),
            "complexity": str(rng.choice(["Simple", "Medium", "Complex"])),
            "techRemarks": "",
            "userRemark": "",
        }
        for tag in DEPARTMENT_TAGS:
            low = float(np.round(rng.uniform(0, 8), 1))
            likely = float(np.round(low + rng.uniform(0, 8), 1))
            item[f"{tag}HoursRange"] = {"min": low, "mostLikely": likely, "max": float(np.round(likely * 1.5, 1))}
        items.append(item)
    return {"sessionId": f"sample-{seed}", "status": "COMPLETED", "progress": "done", "result": items}


def create_sample(
    output_dir: Path,
    rows: int,
    *,
    leading_blank_rows: int = 2,
    blank_index_ratio: float = 0.0,
    drop_ratio: float = 0.0,
    seed: int = 42,
) -> tuple[Path, Path]:
    output_dir.mkdir(parents=True, exist_ok=True)
    features = generate_features(rows, seed)
    results = generate_results(features, seed, drop_ratio)

    sheet = features.astype(object)
    if blank_index_ratio:
        rng = np.random.default_rng(seed + 2)
        mask = rng.random(rows) < blank_index_ratio
        sheet.loc[mask, "Sr No"] = None

    workbook_path = output_dir / "features.xlsx"
    with pd.ExcelWriter(workbook_path, engine="openpyxl") as writer:
        pd.DataFrame([["Project estimate request"], ["Generated sample"]]).to_excel(
            writer, sheet_name="Cover", header=False, index=False
        )
        sheet.to_excel(writer, sheet_name="Features", startrow=leading_blank_rows, index=False)

    results_path = output_dir / "status.json"
    results_path.write_text(json.dumps(results, ensure_ascii=False, indent=2), encoding="utf-8")

    print(f"Created workbook: {workbook_path} ({rows} features, header at row {leading_blank_rows + 1})")
    print(f"Created results:  {results_path} ({len(results['result'])} items)")
    return workbook_path, results_path


def main() -> int:
    parser = argparse.ArgumentParser(description="Generate a sample uploaded workbook + results JSON")
    parser.add_argument("output_dir", type=Path, help="Directory for features.xlsx and status.json")
    parser.add_argument("--rows", type=int, default=200, help="Number of features (default: 200)")
    parser.add_argument("--leading-blank-rows", type=int, default=2)
    parser.add_argument("--blank-index-ratio", type=float, default=0.0, help="Share of rows with blank Sr No")
    parser.add_argument("--drop-ratio", type=float, default=0.0, help="Share of features missing from results")
    parser.add_argument("--seed", type=int, default=42, help="Random seed for reproducible data (default: 42)")
    args = parser.parse_args()

    if args.rows <= 0:
        print("Error: --rows must be positive", file=sys.stderr)
        return 1

    create_sample(
        args.output_dir,
        args.rows,
        leading_blank_rows=args.leading_blank_rows,
        blank_index_ratio=args.blank_index_ratio,
        drop_ratio=args.drop_ratio,
        seed=args.seed,
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
