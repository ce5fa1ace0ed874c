"""Command line entry point for ModelFit training runs."""

from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Iterable, List

from modelfit.core import activations
from modelfit.core.network import Network
from modelfit.core.types import ActivationKind
from modelfit.training import pipelines


def _format_result(result) -> str:
    payload = {
        "epochs": result.epochs,
        "net_error": result.net_error,
        "converged": result.converged,
        "metrics": result.metrics_path,
        "manifest": result.manifest_path,
        "network": result.network_path,
        "run_id": result.run_id,
    }
    if getattr(result, "summary_path", ""):
        payload["summary"] = result.summary_path
    return json.dumps(payload, sort_keys=True)


def _split_list(text: str) -> List[str]:
    return [item.strip() for item in text.split(",") if item.strip()]


def parse_args(argv: Iterable[str] | None = None) -> argparse.Namespace:
    preset_names = sorted(pipelines.presets().keys())
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--preset",
        choices=preset_names,
        default="xor-bipolar",
        help="Preset configuration to execute",
    )
    parser.add_argument(
        "--config", type=Path, help="Optional JSON/YAML config override"
    )
    parser.add_argument(
        "--list-presets", action="store_true", help="List available presets and exit"
    )
    parser.add_argument(
        "--list-activations",
        action="store_true",
        help="List activation kinds with their output ranges and exit",
    )
    parser.add_argument(
        "--dump-config", type=Path, help="Dump the resolved config to a JSON file"
    )
    parser.add_argument("--epochs", type=int, help="Maximum number of training epochs")
    parser.add_argument(
        "--target-error", type=float, help="Stop once an epoch error is at or below this"
    )
    parser.add_argument("--learning-constant", type=float, help="Learning rate")
    parser.add_argument("--momentum", type=float, help="Momentum applied to weight updates")
    parser.add_argument(
        "--seed",
        type=int,
        help="Seed used for weight initialisation, dataset splits and shuffling",
    )
    parser.add_argument("--csv-path", help="Train on this CSV file (implies the csv dataset)")
    parser.add_argument(
        "--input-cols", help="Comma-separated input column names or positions"
    )
    parser.add_argument(
        "--target-cols", help="Comma-separated target column names or positions"
    )
    parser.add_argument("--run-dir", help="Directory receiving the run artifacts")
    parser.add_argument(
        "--enable-plots", action="store_true", help="Enable plotting adapters"
    )
    parser.add_argument(
        "--predict",
        type=Path,
        metavar="NETWORK_FILE",
        help="Load a saved network and print its response to --inputs",
    )
    parser.add_argument(
        "--inputs", help="Comma-separated input vector used with --predict"
    )
    return parser.parse_args(argv)


def _load_override(path: Path) -> dict:
    text = path.read_text()
    if path.suffix in {".yml", ".yaml"}:
        import yaml

        return yaml.safe_load(text)
    return json.loads(text)


def _merge(base: dict, override: dict) -> dict:
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            base[key] = _merge(dict(base[key]), value)
        else:
            base[key] = value
    return base


def _predict(network_file: Path, inputs: str | None) -> None:
    if not inputs:
        raise SystemExit("--predict requires --inputs")
    try:
        vector = [float(value) for value in _split_list(inputs)]
    except ValueError as exc:
        raise SystemExit(f"Invalid --inputs: {exc}") from None
    network = Network.read_from_file(network_file)
    if len(vector) < network.num_inputs:
        raise SystemExit(
            f"The network expects {network.num_inputs} inputs, got {len(vector)}"
        )
    response = network.get_response(vector)
    print(json.dumps({"inputs": vector, "outputs": response.tolist()}))


def _apply_overrides(config: dict, args: argparse.Namespace) -> dict:
    train_cfg = config.setdefault("train", {})
    if args.epochs is not None:
        train_cfg["epochs"] = int(args.epochs)
    if args.target_error is not None:
        train_cfg["target_error"] = float(args.target_error)
    if args.learning_constant is not None:
        train_cfg["learning_constant"] = float(args.learning_constant)
    if args.momentum is not None:
        train_cfg["momentum"] = float(args.momentum)
    if args.run_dir:
        train_cfg["run_dir"] = args.run_dir
    if args.enable_plots:
        train_cfg["enable_plots"] = True

    if args.seed is not None:
        train_cfg["shuffle_seed"] = int(args.seed)
        config.setdefault("model", {})["seed"] = int(args.seed)

    if args.csv_path or args.input_cols or args.target_cols:
        data_cfg = config.setdefault("data", {})
        if args.csv_path and data_cfg.get("name") != "csv":
            data_cfg["name"] = "csv"
            data_cfg["options"] = {}
        opts = data_cfg.setdefault("options", {})
        if args.csv_path:
            opts["csv_path"] = args.csv_path
        if args.input_cols:
            opts["input_cols"] = _split_list(args.input_cols)
        if args.target_cols:
            opts["target_cols"] = _split_list(args.target_cols)
        if args.seed is not None:
            opts["seed"] = int(args.seed)
        # the network size follows the selected columns
        config.setdefault("model", {}).pop("inputs", None)
        config["model"].pop("outputs", None)
    return config


def main(argv: Iterable[str] | None = None) -> None:
    args = parse_args(argv)

    if args.list_presets:
        for name in sorted(pipelines.presets().keys()):
            print(name)
        raise SystemExit(0)

    if args.list_activations:
        for kind in ActivationKind:
            if kind is ActivationKind.UNKNOWN:
                continue
            print(f"{int(kind):>2} {kind.name.lower():<10} {activations.describe(kind)}")
        raise SystemExit(0)

    if args.predict:
        _predict(args.predict, args.inputs)
        return

    config = pipelines.load_preset(args.preset)
    config = json.loads(json.dumps(config))

    if args.config:
        override = _load_override(args.config)
        if {"data", "model", "train"} <= set(override.keys()):
            config = json.loads(json.dumps(override))
        else:
            config = _merge(config, override)

    config = _apply_overrides(config, args)

    if args.dump_config:
        args.dump_config.parent.mkdir(parents=True, exist_ok=True)
        args.dump_config.write_text(json.dumps(config, indent=2))

    result = pipelines.run_pipeline(config)

    if isinstance(result, list):
        for item in result:
            print(_format_result(item))
    else:
        print(_format_result(result))


if __name__ == "__main__":
    main()
