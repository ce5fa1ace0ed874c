from __future__ import annotations

import argparse
import csv
import json
import sys
from pathlib import Path
from statistics import mean, pstdev

KINDS = [
    "unipolar",
    "bipolar",
    "tanh",
    "gaussian",
    "arctan",
    "sine",
    "elliot",
    "isru",
    "softsign",
    "softplus",
]


def _fmt_mu_sigma(vals):
    mu = mean(vals)
    sd = pstdev(vals) if len(vals) > 1 else 0.0
    return f"{mu:.4f} ± {sd:.4f}"


def train_one(kind: str, *, seed: int, epochs: int, lr: float, momentum: float, units: int):
    from modelfit.core.network import Network
    from modelfit.core.types import ActivationKind
    from modelfit.data import get_dataset
    from modelfit.training.trainer import Trainer

    dataset = get_dataset("xor", encoding="bipolar")
    net = Network(num_inputs=2, num_outputs=1, output_kind=ActivationKind.TANH)
    net.add_layer(units, ActivationKind.parse(kind), init_range=2.0, seed=seed)
    trainer = Trainer(learning_constant=lr, momentum=momentum, seed=seed)
    trainer.add_new_training_set(*dataset.training_pairs())

    error = 0.0
    converged_at = None
    for epoch in range(1, epochs + 1):
        error = trainer.train_neural_net(net)
        if error <= 0.01:
            converged_at = epoch
            break
    return {"final_error": float(error), "epochs_to_converge": converged_at}


def main():
    root = Path(__file__).resolve().parents[1]
    if str(root) not in sys.path:
        sys.path.insert(0, str(root))

    ap = argparse.ArgumentParser()
    ap.add_argument("--kinds", nargs="+", default=KINDS)
    ap.add_argument("--seeds", nargs="+", type=int, default=[1, 2, 3])
    ap.add_argument("--epochs", type=int, default=500)
    ap.add_argument("--lr", type=float, default=0.2)
    ap.add_argument("--momentum", type=float, default=0.5)
    ap.add_argument("--units", type=int, default=4)
    ap.add_argument("--out", type=str, default=".artifacts/bench")
    args = ap.parse_args()

    out = Path(args.out)
    out.mkdir(parents=True, exist_ok=True)
    runs = []
    for kind in args.kinds:
        for s in args.seeds:
            r = train_one(
                kind,
                seed=s,
                epochs=args.epochs,
                lr=args.lr,
                momentum=args.momentum,
                units=args.units,
            )
            runs.append({"kind": kind, "seed": s, **r})
    (out / "results.jsonl").write_text(
        "\n".join(json.dumps(x) for x in runs), encoding="utf-8"
    )

    agg = {}
    for kind in args.kinds:
        errors = [r["final_error"] for r in runs if r["kind"] == kind]
        hits = [r["epochs_to_converge"] for r in runs if r["kind"] == kind]
        reached = [h for h in hits if h is not None]
        agg[kind] = {
            "n": len(errors),
            "final_error_mu": mean(errors),
            "final_error_sd": pstdev(errors) if len(errors) > 1 else 0.0,
            "converged": len(reached),
            "epochs_mu": mean(reached) if reached else None,
        }

    csv_path = out / "bench_activations.csv"
    with csv_path.open("w", newline="", encoding="utf-8") as f:
        w = csv.writer(f)
        w.writerow(
            ["kind", "seeds", "epochs", "final_error_mu", "final_error_sd", "converged", "epochs_mu"]
        )
        for kind in args.kinds:
            a = agg[kind]
            w.writerow(
                [
                    kind,
                    a["n"],
                    args.epochs,
                    f"{a['final_error_mu']:.4f}",
                    f"{a['final_error_sd']:.4f}",
                    a["converged"],
                    "" if a["epochs_mu"] is None else f"{a['epochs_mu']:.1f}",
                ]
            )

    md_path = out / "bench_activations.md"
    lines = []
    lines.append("### Hidden activation benchmark: bipolar XOR (offline)")
    lines.append("")
    lines.append(
        f"- Seeds: `{args.seeds}`; Epochs: `{args.epochs}`; "
        f"LR: `{args.lr}`; Momentum: `{args.momentum}`; Units: `{args.units}`"
    )
    lines.append("")
    lines.append("| Kind | Final Error (μ±σ) | Converged | Mean Epochs | Seeds |")
    lines.append("|---|---:|---:|---:|---:|")
    for kind in args.kinds:
        fe = [r["final_error"] for r in runs if r["kind"] == kind]
        a = agg[kind]
        epochs_cell = "-" if a["epochs_mu"] is None else f"{a['epochs_mu']:.1f}"
        lines.append(
            f"| {kind.upper()} | {_fmt_mu_sigma(fe)} | {a['converged']}/{a['n']} | "
            f"{epochs_cell} | {a['n']} |"
        )
    md_path.write_text("\n".join(lines), encoding="utf-8")
    print("Wrote:", csv_path, md_path)


if __name__ == "__main__":
    main()
