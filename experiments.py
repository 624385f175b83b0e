"""
Experiment: static 128-symbol Huffman coding, self-trained vs sample-trained tables

Runs repeated experiments over synthetic ASCII datasets and records build/encode/decode
timings, code lengths against entropy, and the size of the '0'/'1' text output

Pipelines:
  - self_trained:   probabilities estimated from the data being encoded
  - sample_trained: probabilities estimated from an independent sample of the same generator
                    (symbols the sample never saw still get a code, just a long one)

Outputs (in --outdir):
  - metrics.csv     (raw row per run per configuration)
  - summary.csv     (grouped mean/stdev)
  - *.png           (charts)

How to run:
  python experiments.py --outdir results --runs 5
  python experiments.py --outdir results --runs 3 --size_kb 64 --generators zipf128,english_like
"""

from __future__ import annotations

import argparse
import csv
import math
import random
import statistics
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, List, Sequence, Tuple

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt

import huffman as huff
import tables


PIPELINES = ("self_trained", "sample_trained")


# Utilities

def now_ns() -> int:
    return time.perf_counter_ns()

def ns_to_ms(ns: int) -> float:
    return ns / 1_000_000.0

def safe_mkdir(p: Path) -> None:
    p.mkdir(parents=True, exist_ok=True)

def entropy_bits(probabilities: Sequence[float]) -> float:
    return -sum(p * math.log2(p) for p in probabilities if p > 0)

def average_code_length(code_table: Sequence[str], probabilities: Sequence[float]) -> float:
    return sum(p * len(code) for p, code in zip(probabilities, code_table))


# Synthetic dataset generators (all symbols < 128)

def _sample_cdf(rng: random.Random, cdf: List[float]) -> int:
    r = rng.random()
    lo, hi = 0, len(cdf) - 1
    while lo < hi:
        mid = (lo + hi) // 2
        if r <= cdf[mid]:
            hi = mid
        else:
            lo = mid + 1
    return lo

def _cdf(weights: Sequence[float]) -> List[float]:
    total = sum(weights)
    cdf = []
    acc = 0.0
    for w in weights:
        acc += w / total
        cdf.append(acc)
    return cdf

def gen_uniform(size: int, alphabet: int = 128, seed: int = 0) -> bytes:
    rng = random.Random(seed)
    return bytes(rng.randrange(0, alphabet) for _ in range(size))

def gen_repetitive(size: int, dominant: int = ord('A'), dom_frac: float = 0.90, seed: int = 0) -> bytes:
    rng = random.Random(seed)
    other_symbols = [i for i in range(huff.ALPHABET_SIZE) if i != dominant]
    out = bytearray()
    for _ in range(size):
        if rng.random() < dom_frac:
            out.append(dominant)
        else:
            out.append(rng.choice(other_symbols))
    return bytes(out)

def gen_zipf_like(size: int, alphabet: int = 128, s: float = 1.2, seed: int = 0) -> bytes:
    rng = random.Random(seed)
    cdf = _cdf([1.0 / ((i + 1) ** s) for i in range(alphabet)])
    return bytes(_sample_cdf(rng, cdf) for _ in range(size))

def gen_english_like(size: int, seed: int = 0) -> bytes:
    rng = random.Random(seed)
    chars = (
        " etaoinshrdlcumwfgypbvkjxq"
        "ETAOINSHRDLCUMWFGYPBVKJXQ"
        ".,\n"
    )
    weights = []
    for ch in chars:
        if ch == ' ':
            weights.append(13.0)
        elif ch in ".,\n":
            weights.append(1.5)
        elif ch.lower() in "etaoinshrdlu":
            weights.append(6.0)
        elif ch.lower() in "cmfwgypbvk":
            weights.append(2.5)
        else:
            weights.append(1.2)

    cdf = _cdf(weights)
    return bytes(ord(chars[_sample_cdf(rng, cdf)]) for _ in range(size))

GENERATOR_REGISTRY: Dict[str, Callable[[int, int], bytes]] = {
    "uniform128": lambda size, seed: gen_uniform(size, alphabet=128, seed=seed),
    "uniform64": lambda size, seed: gen_uniform(size, alphabet=64, seed=seed),
    "zipf128": lambda size, seed: gen_zipf_like(size, alphabet=128, s=1.2, seed=seed),
    "zipf64": lambda size, seed: gen_zipf_like(size, alphabet=64, s=1.2, seed=seed),
    "repetitive90": lambda size, seed: gen_repetitive(size, dominant=ord('A'), dom_frac=0.90, seed=seed),
    "repetitive99": lambda size, seed: gen_repetitive(size, dominant=ord('A'), dom_frac=0.99, seed=seed),
    "english_like": lambda size, seed: gen_english_like(size, seed=seed),
}

def generate_dataset(name: str, size_bytes: int, seed: int) -> bytes:
    fn = GENERATOR_REGISTRY.get(name)
    if fn is None:
        raise ValueError(f"unknown generator {name!r}, expected one of {', '.join(sorted(GENERATOR_REGISTRY))}")
    return fn(size_bytes, seed)


# Experiment runner

@dataclass
class MetricRow:
    dataset_name: str
    file_size_bytes: int
    run_id: int
    pipeline: str  # "self_trained" or "sample_trained"
    unseen_symbols: int  # symbols with probability 0 in the table used

    build_ms: float
    encode_ms: float
    decode_ms: float
    total_ms: float

    encoded_bits: int
    packed_bytes: int  # what the bit-string would take packed 8 bits per byte
    text_ratio: float  # encoded characters / original bytes
    packed_ratio: float

    avg_code_length: float  # expected bits/symbol under the data's own distribution
    entropy: float
    efficiency: float  # entropy / avg_code_length
    correctness_ok: int  # 1 or 0


def run_one(data: bytes, probabilities: Sequence[float], pipeline: str) -> MetricRow:
    # build tree + code table
    t0 = now_ns()
    root = huff.build_huffman_tree(probabilities)
    code_table = huff.generate_huffman_codes(root)
    t1 = now_ns()

    # encode
    t2 = now_ns()
    bits = huff.huffman_encode(data, code_table)
    t3 = now_ns()

    # decode
    t4 = now_ns()
    decoded = huff.huffman_decode(bits, root)
    t5 = now_ns()

    build_ms = ns_to_ms(t1 - t0)
    encode_ms = ns_to_ms(t3 - t2)
    decode_ms = ns_to_ms(t5 - t4)

    actual = tables.estimate_probabilities(data)
    avg_len = average_code_length(code_table, actual)
    h = entropy_bits(actual)
    packed = (len(bits) + 7) // 8

    return MetricRow(
        dataset_name="",
        file_size_bytes=len(data),
        run_id=0,
        pipeline=pipeline,
        unseen_symbols=sum(1 for p in probabilities if p == 0),
        build_ms=build_ms,
        encode_ms=encode_ms,
        decode_ms=decode_ms,
        total_ms=build_ms + encode_ms + decode_ms,
        encoded_bits=len(bits),
        packed_bytes=packed,
        text_ratio=len(bits) / max(1, len(data)),
        packed_ratio=packed / max(1, len(data)),
        avg_code_length=avg_len,
        entropy=h,
        efficiency=(h / avg_len) if avg_len > 0 else 0.0,
        correctness_ok=1 if decoded == data else 0,
    )


def run_dataset(gen_name: str, size_b: int, run_id: int, seed: int, sample_b: int) -> List[MetricRow]:
    data = generate_dataset(gen_name, size_b, seed)
    sample = generate_dataset(gen_name, sample_b, seed + 1_000_003)

    rows = []
    for pipeline in PIPELINES:
        if pipeline == "self_trained":
            probabilities = tables.estimate_probabilities(data)
        else:
            probabilities = tables.estimate_probabilities(sample)
        row = run_one(data, probabilities, pipeline)
        row.dataset_name = gen_name
        row.run_id = run_id
        rows.append(row)
    return rows


def write_csv(path: Path, rows: List[MetricRow]) -> None:
    fields = list(MetricRow.__dataclass_fields__.keys())
    with path.open("w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=fields)
        w.writeheader()
        for r in rows:
            w.writerow({k: getattr(r, k) for k in fields})


def mean_stdev(vals: List[float]) -> Tuple[float, float]:
    if len(vals) == 1:
        return vals[0], 0.0
    return statistics.mean(vals), statistics.stdev(vals)


SUMMARY_METRICS = ("packed_ratio", "avg_code_length", "efficiency", "build_ms", "encode_ms", "decode_ms", "total_ms")

def group_summary(rows: List[MetricRow], out_path: Path) -> None:
    """
    Group by dataset_name, file_size_bytes, pipeline and compute mean/stdev
    """
    key_to: Dict[Tuple[str, int, str], List[MetricRow]] = {}
    for r in rows:
        key = (r.dataset_name, r.file_size_bytes, r.pipeline)
        key_to.setdefault(key, []).append(r)

    summary_fields = ["dataset_name", "file_size_bytes", "pipeline", "n_runs", "entropy_mean"]
    for m in SUMMARY_METRICS:
        summary_fields += [f"{m}_mean", f"{m}_stdev"]
    summary_fields.append("correctness_ok_rate")

    with out_path.open("w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=summary_fields)
        w.writeheader()
        for key, items in sorted(key_to.items()):
            dataset_name, size_b, pipeline = key
            out = {
                "dataset_name": dataset_name,
                "file_size_bytes": size_b,
                "pipeline": pipeline,
                "n_runs": len(items),
                "entropy_mean": statistics.mean(x.entropy for x in items),
                "correctness_ok_rate": sum(x.correctness_ok for x in items) / len(items),
            }
            for m in SUMMARY_METRICS:
                out[f"{m}_mean"], out[f"{m}_stdev"] = mean_stdev([getattr(x, m) for x in items])
            w.writerow(out)


# Plotting

def plot_results(rows: List[MetricRow], outdir: Path) -> None:
    if not rows:
        return

    datasets = sorted(set(r.dataset_name for r in rows))
    x = list(range(len(datasets)))

    def mean_for(dataset: str, pipeline: str, field: str) -> float:
        vals = [getattr(r, field) for r in rows if r.dataset_name == dataset and r.pipeline == pipeline]
        return statistics.mean(vals) if vals else float("nan")

    plt.figure()
    plt.plot(x, [mean_for(d, "self_trained", "entropy") for d in datasets], marker="x", linestyle="--", label="entropy")
    for p in PIPELINES:
        y = [mean_for(d, p, "avg_code_length") for d in datasets]
        plt.plot(x, y, marker="o", label=p)
    plt.xticks(x, datasets, rotation=20, ha="right")
    plt.ylabel("Bits per Symbol")
    plt.title("Average Code Length vs Entropy")
    plt.legend()
    plt.tight_layout()
    plt.savefig(outdir / "code_length_vs_entropy.png", dpi=200)
    plt.close()

    plt.figure()
    for p in PIPELINES:
        y = [mean_for(d, p, "packed_ratio") for d in datasets]
        plt.plot(x, y, marker="o", label=p)
    plt.xticks(x, datasets, rotation=20, ha="right")
    plt.ylabel("Packed Bytes / Original Bytes")
    plt.title("Compression Ratio by Distribution")
    plt.legend()
    plt.tight_layout()
    plt.savefig(outdir / "packed_ratio.png", dpi=200)
    plt.close()

    plt.figure()
    for field in ("build_ms", "encode_ms", "decode_ms"):
        y = [mean_for(d, "self_trained", field) for d in datasets]
        plt.plot(x, y, marker="o", label=field.replace("_ms", ""))
    plt.xticks(x, datasets, rotation=20, ha="right")
    plt.ylabel("Time (ms)")
    plt.title("Runtime by Stage (self_trained)")
    plt.legend()
    plt.tight_layout()
    plt.savefig(outdir / "stage_times.png", dpi=200)
    plt.close()


# Main

def parse_csv_list(s: str) -> List[str]:
    return [x.strip() for x in s.split(",") if x.strip()]

def main(argv: List[str] = None) -> int:
    ap = argparse.ArgumentParser()
    ap.add_argument("--outdir", type=str, default="results", help="Output directory for CSV and plots")
    ap.add_argument("--runs", type=int, default=5, help="Repetitions per configuration")
    ap.add_argument("--seed", type=int, default=123, help="Base random seed")
    ap.add_argument("--size_kb", type=int, default=256, help="Size of each encoded dataset in KB")
    ap.add_argument("--sample_kb", type=int, default=16, help="Size of the training sample for sample_trained in KB")
    ap.add_argument("--generators", type=str, default="uniform128,zipf128,repetitive90,english_like",
                    help="Comma-separated dataset generator names")
    ap.add_argument("--no_plots", action="store_true", help="Only write the CSV files")
    args = ap.parse_args(argv)

    outdir = Path(args.outdir)
    safe_mkdir(outdir)

    size_b = max(1, args.size_kb) * 1024
    sample_b = max(1, args.sample_kb) * 1024

    rows: List[MetricRow] = []
    for gen_name in parse_csv_list(args.generators):
        for run_id in range(1, args.runs + 1):
            rows.extend(run_dataset(gen_name, size_b, run_id, args.seed + run_id, sample_b))

    metrics_csv = outdir / "metrics.csv"
    summary_csv = outdir / "summary.csv"
    write_csv(metrics_csv, rows)
    group_summary(rows, summary_csv)

    if not args.no_plots:
        plot_results(rows, outdir)

    ok_rate = sum(r.correctness_ok for r in rows) / max(1, len(rows))
    print(f"Wrote {len(rows)} rows to {metrics_csv}")
    print(f"Wrote grouped summary to {summary_csv}")
    print(f"Correctness rate across all runs: {ok_rate:.3f}")
    if not args.no_plots:
        print("Charts saved in:", outdir.resolve())
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
