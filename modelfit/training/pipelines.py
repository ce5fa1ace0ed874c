"""Pipeline assembly: presets, network construction and the epoch loop."""

from __future__ import annotations

import json
import time
from copy import deepcopy
from pathlib import Path
from typing import Dict, List, Mapping, Sequence

from ..core.network import Network
from ..core.types import ActivationKind, RunResult
from ..data import registry
from ..reporting.artifacts import config_hash, write_manifest
from ..reporting.metrics import CsvSink, JsonlSink
from ..reporting.plots import PlotAdapter
from ..reporting.summary import write_summary
from .metrics import default_metrics, evaluate
from .trainer import DEFAULT_LEARNING_CONSTANT, DEFAULT_SHUFFLE_SEED, Trainer

_PRESETS: Dict[str, Mapping[str, object]] = {
    "xor-bipolar": {
        "data": {"name": "xor", "options": {"encoding": "bipolar"}},
        "model": {
            "output": {"kind": "bipolar", "slope": 1.0, "amplify": 1.0},
            "hidden": [{"units": 3, "kind": "bipolar", "init_range": 2.0}],
        },
        "train": {
            "epochs": 2000,
            "target_error": 0.01,
            "learning_constant": 0.5,
            "momentum": 0.25,
            "shuffle_seed": 2,
            "run_dir": "runs/xor-bipolar",
            "enable_plots": False,
        },
    },
    "xor-unipolar": {
        "data": {"name": "xor", "options": {"encoding": "unipolar"}},
        "model": {
            "output": {"kind": "unipolar", "slope": 1.0, "amplify": 1.0},
            "hidden": [{"units": 4, "kind": "unipolar", "init_range": 2.0}],
        },
        "train": {
            "epochs": 5000,
            "target_error": 0.01,
            "learning_constant": 0.5,
            "momentum": 0.5,
            "shuffle_seed": 2,
            "run_dir": "runs/xor-unipolar",
            "enable_plots": False,
        },
    },
    "sine-tanh": {
        "data": {
            "name": "sine",
            "options": {"freq": 1.0, "amplitude": 0.8, "n_points": 64, "val_split": 0.25},
        },
        "model": {
            "output": {"kind": "linear"},
            "hidden": [{"units": 8, "kind": "tanh", "init_range": 1.0}],
        },
        "train": {
            "epochs": 300,
            "target_error": 0.005,
            "learning_constant": 0.05,
            "momentum": 0.5,
            "eval_every": 10,
            "run_dir": "runs/sine-tanh",
            "enable_plots": False,
        },
    },
    "csv-regression": {
        "data": {
            "name": "csv",
            "options": {"standardize_inputs": True, "val_split": 0.25, "seed": 0},
        },
        "model": {
            "output": {"kind": "linear"},
            "hidden": [{"units": 4, "kind": "tanh", "init_range": 1.0}],
        },
        "train": {
            "epochs": 200,
            "target_error": 0.01,
            "learning_constant": 0.01,
            "momentum": 0.25,
            "eval_every": 10,
            "run_dir": "runs/csv-regression",
            "enable_plots": False,
        },
    },
    "xor-rate-sweep": {
        "sweep": {"learning_constants": [0.1, 0.5], "momenta": [0.0, 0.5]},
        "data": {"name": "xor", "options": {"encoding": "bipolar"}},
        "model": {
            "output": {"kind": "bipolar"},
            "hidden": [{"units": 3, "kind": "bipolar", "init_range": 2.0}],
        },
        "train": {
            "epochs": 500,
            "target_error": 0.01,
            "run_dir": "runs/xor-rate-sweep",
            "enable_plots": False,
        },
    },
}

_PRESET_DIR = Path(__file__).resolve().parents[2] / "configs" / "presets"
_FILE_PRESETS_CACHE: Dict[str, Mapping[str, object]] | None = None
_REQUIRED_SECTIONS = {"data", "model", "train"}


def _read_preset_file(path: Path) -> Mapping[str, object]:
    text = path.read_text()
    suffix = path.suffix.lower()
    if suffix in {".yaml", ".yml"}:
        import yaml

        data = yaml.safe_load(text) or {}
    elif suffix == ".json":
        data = json.loads(text or "{}")
    else:
        raise ValueError(f"Unsupported preset file type: {path.suffix}")

    if not isinstance(data, Mapping):
        raise TypeError(f"Preset {path.name} must decode to a mapping")
    return data


def _file_presets() -> Dict[str, Mapping[str, object]]:
    global _FILE_PRESETS_CACHE
    if _FILE_PRESETS_CACHE is None:
        found: Dict[str, Mapping[str, object]] = {}
        if _PRESET_DIR.exists():
            for file in sorted(_PRESET_DIR.iterdir()):
                if file.suffix.lower() not in {".yaml", ".yml", ".json"}:
                    continue
                data = _read_preset_file(file)
                missing = _REQUIRED_SECTIONS - set(data)
                if missing:
                    missing_str = ", ".join(sorted(missing))
                    raise KeyError(f"Preset {file.name} is missing required sections: {missing_str}")
                found[file.stem] = json.loads(json.dumps(data))
        _FILE_PRESETS_CACHE = found
    cache = _FILE_PRESETS_CACHE or {}
    return {name: deepcopy(cfg) for name, cfg in cache.items()}


def presets() -> Mapping[str, Mapping[str, object]]:
    combined: Dict[str, Mapping[str, object]] = {}
    combined.update({name: deepcopy(cfg) for name, cfg in _PRESETS.items()})
    combined.update(_file_presets())
    return combined


def load_preset(name: str) -> Mapping[str, object]:
    file_overrides = _file_presets()
    if name in file_overrides:
        return file_overrides[name]
    try:
        return deepcopy(_PRESETS[name])
    except KeyError as exc:
        raise KeyError(f"Unknown preset: {name}") from exc


def run_pipeline(config: Mapping[str, object]) -> RunResult | List[RunResult]:
    """Train according to ``config``; a ``sweep`` section yields one result per run."""

    missing = _REQUIRED_SECTIONS - set(config)
    if missing:
        raise KeyError(f"Config is missing required sections: {', '.join(sorted(missing))}")
    if "sweep" in config:
        return _run_sweep(config)
    return _train_single(config)


def build_network(model_cfg: Mapping[str, object], d_in: int, d_out: int) -> Network:
    """Construct a :class:`Network` from the ``model`` section of a config.

    ``inputs``/``outputs`` default to the dataset dimensions and must agree
    with them when given. Hidden layer ``i`` draws its weights with
    ``seed + i`` when a model seed is set; without hidden layers the seed
    goes to the direct input-to-output connection.
    """

    n_in = int(model_cfg.get("inputs", d_in))
    n_out = int(model_cfg.get("outputs", d_out))
    if n_in != d_in:
        raise ValueError(f"Configured inputs={n_in} but the dataset has {d_in}")
    if n_out != d_out:
        raise ValueError(f"Configured outputs={n_out} but the dataset has {d_out}")

    seed = model_cfg.get("seed")
    output_cfg = dict(model_cfg.get("output", {}))  # type: ignore[arg-type]
    network = Network(
        num_inputs=n_in,
        num_outputs=n_out,
        output_kind=ActivationKind.parse(output_cfg.get("kind", "threshold")),
        output_slope=float(output_cfg.get("slope", 1.0)),
        output_amplify=float(output_cfg.get("amplify", 1.0)),
        seed=None if seed is None else int(seed),
    )

    for idx, layer in enumerate(model_cfg.get("hidden", [])):  # type: ignore[union-attr]
        layer_cfg = dict(layer)
        added = network.add_layer(
            int(layer_cfg["units"]),
            ActivationKind.parse(layer_cfg.get("kind", "bipolar")),
            init_range=float(layer_cfg.get("init_range", 2.0)),
            slope=float(layer_cfg.get("slope", 1.0)),
            amplify=float(layer_cfg.get("amplify", 1.0)),
            seed=None if seed is None else int(seed) + idx,
        )
        if not added:
            raise ValueError(f"Invalid settings for hidden layer {idx}: {layer_cfg}")
    return network


def _run_sweep(config: Mapping[str, object]) -> List[RunResult]:
    sweep_cfg = config["sweep"]
    base_dir = Path(str(config["train"].get("run_dir", "runs/sweep")))  # type: ignore[union-attr]
    rates = sweep_cfg.get("learning_constants", [DEFAULT_LEARNING_CONSTANT])  # type: ignore[union-attr]
    momenta = sweep_cfg.get("momenta", [0.0])  # type: ignore[union-attr]
    results: List[RunResult] = []
    for rate in rates:
        for momentum in momenta:
            cfg = deepcopy(dict(config))
            cfg.pop("sweep", None)
            train_cfg = cfg.setdefault("train", {})
            train_cfg["learning_constant"] = float(rate)
            train_cfg["momentum"] = float(momentum)
            train_cfg["run_dir"] = str(base_dir / f"lc{float(rate):g}-m{float(momentum):g}")
            results.append(_train_single(cfg))
    return results


def _train_single(config: Mapping[str, object]) -> RunResult:
    data_cfg = dict(config["data"])  # type: ignore[arg-type]
    model_cfg = dict(config["model"])  # type: ignore[arg-type]
    train_cfg = dict(config["train"])  # type: ignore[arg-type]

    dataset = registry.get(data_cfg["name"], **data_cfg.get("options", {}))
    data_spec = dataset.data_spec
    network = build_network(model_cfg, data_spec.d_in, data_spec.d_out)

    epochs = int(train_cfg.get("epochs", 100))
    target_error = float(train_cfg.get("target_error", 0.0))
    eval_every = max(1, int(train_cfg.get("eval_every", 1)))
    shuffle_seed = int(train_cfg.get("shuffle_seed", DEFAULT_SHUFFLE_SEED))
    trainer = Trainer(
        learning_constant=float(train_cfg.get("learning_constant", DEFAULT_LEARNING_CONSTANT)),
        momentum=float(train_cfg.get("momentum", 0.0)),
        seed=shuffle_seed,
    )
    train_inputs, train_targets = dataset.training_pairs("train")
    val_inputs, val_targets = dataset.training_pairs("val")
    trainer.add_new_training_set(train_inputs, train_targets)

    metric_names = default_metrics(data_spec.task_type)
    run_id = config_hash(config)
    run_dir = _resolve_run_dir(train_cfg, dataset.name, run_id)
    run_dir.mkdir(parents=True, exist_ok=True)

    _print_startup_summary(
        dataset_name=dataset.name,
        network=network,
        trainer=trainer,
        splits=dataset.splits.sizes,
        metrics=metric_names,
        run_id=run_id,
    )

    train_jsonl = JsonlSink(run_dir / "metrics_train.jsonl", split="train", seed=shuffle_seed)
    train_csv = CsvSink(run_dir / "metrics_train.csv", split="train")
    val_jsonl = JsonlSink(run_dir / "metrics_val.jsonl", split="val", seed=shuffle_seed)
    val_csv = CsvSink(run_dir / "metrics_val.csv", split="val")
    plotter = PlotAdapter(run_dir, enable_plots=bool(train_cfg.get("enable_plots", False)))

    converged = False
    epoch = 0
    final_metrics: Mapping[str, float] = {}
    for epoch in range(1, epochs + 1):
        error = trainer.train_neural_net(network)
        converged = error <= target_error
        record: Dict[str, float] = {"error": error, "net_error": trainer.net_error}
        plot_record = {"error": error}

        # epoch 1 is always evaluated so the CSV header carries every metric
        if epoch == 1 or epoch % eval_every == 0 or epoch == epochs or converged:
            train_scores = evaluate(
                network, train_inputs, train_targets, metric_names=metric_names
            )
            record.update({k: v for k, v in train_scores.items() if k != "error"})
            final_metrics = train_scores
            if val_inputs:
                val_scores = evaluate(network, val_inputs, val_targets, metric_names=metric_names)
                val_jsonl.on_epoch(epoch, val_scores)
                val_csv.on_epoch(epoch, val_scores)
                plot_record["val_error"] = val_scores["error"]
                final_metrics = val_scores

        train_jsonl.on_epoch(epoch, record)
        train_csv.on_epoch(epoch, record)
        plotter.on_epoch(epoch, plot_record)
        if converged:
            break

    checkpoint = network.write_to_file(run_dir / str(train_cfg.get("checkpoint", "network.txt")))
    plotter.close()
    (run_dir / "metrics_final.json").write_text(json.dumps(dict(final_metrics), indent=2))

    manifest = write_manifest(
        run_dir / "manifest.json",
        config=config,
        dataset_provenance=dataset.provenance,
        network=network.describe(),
    )
    summary_tail = int(train_cfg.get("summary_tail", 32))
    summary_sources = [train_jsonl.path] + ([val_jsonl.path] if val_inputs else [])
    summary_path = write_summary(summary_sources, run_dir / "summary.json", tail=summary_tail)

    (run_dir / "config.json").write_text(json.dumps(_safe_config(config), indent=2))
    (run_dir / "metrics.jsonl").write_text(train_jsonl.path.read_text())
    (run_dir / "metrics.csv").write_text(train_csv.path.read_text())

    return RunResult(
        epochs=epoch,
        net_error=trainer.net_error,
        converged=converged,
        metrics_path=str(train_jsonl.path),
        manifest_path=manifest,
        network_path=str(checkpoint),
        summary_path=str(summary_path),
        run_id=run_id,
        final_metrics=dict(final_metrics),
    )


def _resolve_run_dir(train_cfg: Mapping[str, object], dataset: str, run_id: str) -> Path:
    if "run_dir" in train_cfg:
        return Path(str(train_cfg["run_dir"]))
    timestamp = time.strftime("%Y%m%d-%H%M%S")
    return Path("runs") / timestamp / dataset / run_id


def _safe_config(config: Mapping[str, object]) -> Mapping[str, object]:
    return json.loads(json.dumps(config, default=str))


def _print_startup_summary(
    *,
    dataset_name: str,
    network: Network,
    trainer: Trainer,
    splits: Mapping[str, int],
    metrics: Sequence[str],
    run_id: str,
) -> None:
    hidden = [
        f"{layer['units']}x{layer['kind']}" for layer in network.describe()["hidden"]  # type: ignore[union-attr]
    ]
    print("=== ModelFit run ===")
    print(f"Run id        : {run_id}")
    print(f"Dataset       : {dataset_name} {dict(splits)}")
    print(f"Inputs        : {network.num_inputs}")
    print(f"Hidden        : {hidden or 'none'}")
    print(f"Outputs       : {network.num_outputs}x{network.output_kind.name.lower()}")
    print(f"Learning rate : {trainer.learning_constant}")
    print(f"Momentum      : {trainer.momentum}")
    print(f"Metrics       : {','.join(metrics)}")
    print(f"Parameters    : {network.parameter_count()}")
    print("====================")


__all__ = ["build_network", "load_preset", "presets", "run_pipeline"]
