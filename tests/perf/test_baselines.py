import json
import math
import time
from pathlib import Path

import pytest

from modelfit.training import pipelines


@pytest.mark.perf
def test_xor_baseline_runtime(tmp_path):
    config = pipelines.load_preset("xor-bipolar")
    config["train"].update({"epochs": 200, "target_error": 0.0, "run_dir": str(tmp_path / "run")})

    start = time.perf_counter()
    result = pipelines.run_pipeline(config)
    duration = time.perf_counter() - start

    assert duration <= 10.0
    assert result.epochs == 200

    metrics = [
        json.loads(line) for line in Path(result.metrics_path).read_text().splitlines() if line
    ]
    assert metrics, "metrics should not be empty"
    assert all(math.isfinite(record["error"]) for record in metrics)
