"""
escrow.metrics — Prometheus counters & histograms for the escrow engine.

Centralized registry: consumers call `get_registry()` and `generate_latest_text()`
to expose metrics (the CLI `metrics` command prints the exposition text).

Exposed metrics (names are prefixed with `escrow_`):
  - instructions_total{instruction,result} : Counter — instructions processed
  - value_moved_total{kind}                : Counter — native value moved by kind
  - instruction_seconds{instruction}       : Histogram — wall time per instruction

Labels:
  - instruction ∈ {init_escrow, exchange, unknown}
  - result      ∈ {success, failed}
  - kind        ∈ {listing_fee, sales_tax, royalty, payment}
"""

from __future__ import annotations

import os
import time
from dataclasses import dataclass
from typing import Dict, Iterable, Optional

from prometheus_client import (
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)

_PREFIX = "escrow_"


def _buckets_from_env(name: str, default: Iterable[float]) -> Iterable[float]:
    raw = os.getenv(name)
    if not raw:
        return default
    out = []
    for tok in raw.split(","):
        tok = tok.strip()
        if not tok:
            continue
        try:
            out.append(float(tok))
        except ValueError:
            continue
    return out or default


_SECONDS_BUCKETS = tuple(_buckets_from_env(
    "ESCROW_METRICS_SECONDS_BUCKETS",
    # 50µs .. 1s
    (0.00005, 0.0001, 0.00025, 0.0005, 0.001, 0.0025, 0.005, 0.01, 0.025, 0.1, 0.25, 1.0),
))


# ------------------------------ registry & ctor ------------------------------

_registry: Optional[CollectorRegistry] = None

INSTRUCTIONS_TOTAL: Counter
VALUE_MOVED_TOTAL: Counter
INSTRUCTION_SECONDS: Histogram


def get_registry() -> CollectorRegistry:
    """Return the metrics registry, creating it (and the metrics) on first use."""
    global _registry
    if _registry is None:
        _registry = CollectorRegistry()
        _build_metrics(_registry)
    return _registry


def _build_metrics(reg: CollectorRegistry) -> None:
    global INSTRUCTIONS_TOTAL, VALUE_MOVED_TOTAL, INSTRUCTION_SECONDS

    INSTRUCTIONS_TOTAL = Counter(
        _PREFIX + "instructions_total",
        "Escrow instructions processed (by instruction and result).",
        labelnames=("instruction", "result"),
        registry=reg,
    )
    VALUE_MOVED_TOTAL = Counter(
        _PREFIX + "value_moved_total",
        "Native value moved by successful instructions (by kind).",
        labelnames=("kind",),
        registry=reg,
    )
    INSTRUCTION_SECONDS = Histogram(
        _PREFIX + "instruction_seconds",
        "Wall time to apply one instruction, including rollback.",
        labelnames=("instruction",),
        buckets=_SECONDS_BUCKETS,
        registry=reg,
    )


# ------------------------------ helpers -------------------------------------

def _norm_instruction(name: Optional[str]) -> str:
    s = (name or "").strip().lower()
    return s if s in {"init_escrow", "exchange"} else "unknown"


def observe_instruction(*, instruction: Optional[str], result: str) -> None:
    """Count one processed instruction. `result` is 'success' or 'failed'."""
    get_registry()
    r = "success" if result == "success" else "failed"
    INSTRUCTIONS_TOTAL.labels(instruction=_norm_instruction(instruction), result=r).inc()


def observe_value(kind: str, amount: int) -> None:
    """Add `amount` base units of native value moved under `kind`. Negative is ignored."""
    get_registry()
    if amount > 0:
        VALUE_MOVED_TOTAL.labels(kind=kind).inc(amount)


@dataclass
class _TimerCtx:
    h: Histogram
    labels: Dict[str, str]
    t0: float

    def stop(self) -> float:
        dt = max(0.0, time.perf_counter() - self.t0)
        self.h.labels(**self.labels).observe(dt)
        return dt

    def __enter__(self) -> "_TimerCtx":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()


def time_instruction(instruction: Optional[str]) -> _TimerCtx:
    """
    Context manager timing one instruction.

        with time_instruction("exchange"):
            engine.process(data, accounts)
    """
    get_registry()
    return _TimerCtx(
        h=INSTRUCTION_SECONDS,
        labels={"instruction": _norm_instruction(instruction)},
        t0=time.perf_counter(),
    )


# ------------------------------ exposition ----------------------------------

def generate_latest_text() -> bytes:
    """Prometheus exposition format for the current registry."""
    return generate_latest(get_registry())


__all__ = [
    "get_registry",
    "generate_latest_text",
    "observe_instruction",
    "observe_value",
    "time_instruction",
]
