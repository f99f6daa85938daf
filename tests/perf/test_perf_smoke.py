from __future__ import annotations

import time

import numpy as np

from sheet_annotator.models import HoursRange, ResultRecord
from sheet_annotator.services.orchestrator import annotate_workbook

"""Performance smoke test: a few thousand rows should annotate well within CI time."""

ROWS = 3_000


def test_perf_smoke(make_workbook):
    rng = np.random.default_rng(7)
    sheet = [["Sr No", "Feature", "Notes"]]
    sheet += [[i, f"Feature {i}", f"note {i}"] for i in range(1, ROWS + 1)]
    data = make_workbook({"Cover": [["x"]], "Features": sheet})
    likely = np.round(rng.uniform(0, 10, ROWS), 1)
    # every third record drops its index to force the name rule
    records = [
        ResultRecord(
            None if i % 3 == 0 else i,
            f"feature {i}",
            ranges={"frontend": HoursRange(0, float(likely[i - 1]), float(likely[i - 1]) * 2)},
        )
        for i in range(1, ROWS + 1)
    ]

    start = time.perf_counter()
    result = annotate_workbook(data, records)
    elapsed = time.perf_counter() - start

    assert result.data_rows == ROWS
    assert len(result.unmatched) == 0
    # extremely lenient bound so CI stays stable
    assert elapsed < 60, f"annotation too slow: {elapsed:.2f}s"
    throughput = ROWS / elapsed
    assert throughput > 50
