import json
from pathlib import Path

import pytest

from cli.main import main
from modelfit.core.connection import WeightedConnection
from modelfit.core.network import Network
from modelfit.core.types import ActivationKind


def _last_json(out):
    return json.loads(out.strip().splitlines()[-1])


def test_cli_default_preset(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    main(["--epochs", "5"])
    payload = _last_json(capsys.readouterr().out)
    run_dir = Path("runs/xor-bipolar")
    assert (run_dir / "metrics.jsonl").exists()
    assert (run_dir / "manifest.json").exists()
    assert payload["epochs"] == 5
    assert payload["network"] == str(run_dir / "network.txt")
    assert set(payload) >= {"epochs", "net_error", "converged", "metrics", "manifest", "network", "run_id"}


def test_cli_overrides_and_dump_config(tmp_path, capsys):
    dump = tmp_path / "resolved.json"
    main(
        [
            "--preset",
            "xor-unipolar",
            "--epochs",
            "3",
            "--learning-constant",
            "0.2",
            "--momentum",
            "0.1",
            "--seed",
            "9",
            "--run-dir",
            str(tmp_path / "run"),
            "--dump-config",
            str(dump),
        ]
    )
    resolved = json.loads(dump.read_text())
    assert resolved["train"]["learning_constant"] == 0.2
    assert resolved["train"]["momentum"] == 0.1
    assert resolved["train"]["shuffle_seed"] == 9
    assert resolved["model"]["seed"] == 9
    assert _last_json(capsys.readouterr().out)["epochs"] == 3


def test_cli_config_override_file(tmp_path, capsys):
    override = tmp_path / "override.json"
    override.write_text(json.dumps({"train": {"epochs": 2, "run_dir": str(tmp_path / "run")}}))
    main(["--config", str(override)])
    assert _last_json(capsys.readouterr().out)["epochs"] == 2


def test_cli_trains_on_a_csv_file(tmp_path, capsys):
    data = tmp_path / "data.csv"
    data.write_text("x1,x2,unused,y\n0.1,0.2,9,0.3\n0.4,0.1,9,0.5\n-0.2,0.3,9,0.1\n")
    main(
        [
            "--csv-path",
            str(data),
            "--input-cols",
            "x1,x2",
            "--target-cols",
            "y",
            "--epochs",
            "2",
            "--run-dir",
            str(tmp_path / "run"),
        ]
    )
    payload = _last_json(capsys.readouterr().out)
    manifest = json.loads(Path(payload["manifest"]).read_text())
    assert manifest["dataset"]["input_cols"] == ["x1", "x2"]
    assert Network.read_from_file(payload["network"]).num_inputs == 2


def test_cli_predict(tmp_path, capsys):
    net = Network(2, 1, ActivationKind.LINEAR)
    net.set_weighted_connection(0, WeightedConnection.from_weights([[1.0, 2.0]]))
    path = net.write_to_file(tmp_path / "net.txt")
    main(["--predict", str(path), "--inputs", "0.5,0.25"])
    payload = _last_json(capsys.readouterr().out)
    assert payload["outputs"] == [1.0]


def test_cli_predict_needs_inputs(tmp_path):
    with pytest.raises(SystemExit):
        main(["--predict", str(tmp_path / "net.txt")])


def test_cli_listings(capsys):
    with pytest.raises(SystemExit) as exc:
        main(["--list-presets"])
    assert exc.value.code == 0
    assert "xor-bipolar" in capsys.readouterr().out.split()

    with pytest.raises(SystemExit):
        main(["--list-activations"])
    out = capsys.readouterr().out
    assert "softplus" in out and "unknown" not in out
