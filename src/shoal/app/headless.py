from __future__ import annotations

import argparse
import csv
import json
import math
from dataclasses import replace
from pathlib import Path
from typing import Optional

from ..logging_config import configure_logging
from ..sim.core.config import AppConfig, EngineConfig, ShoalConfig
from ..sim.core.simulator import ShoalSimulator
from ..sim.types.metrics import TickMetrics

# Headless runs advance by a fixed step so identical seeds give identical logs.
DEFAULT_TIME_STEP = 1.0 / 60.0

_BASIC_HEADER = [
    "tick",
    "population",
    "social",
    "avg_density",
    "avg_speed",
    "avg_stress",
    "tick_ms",
]

_DETAILED_HEADER = [
    "tick",
    "population",
    "social",
    "alone",
    "social_ratio",
    "avg_density",
    "max_density",
    "avg_speed",
    "avg_stress",
    "occupied_cells",
    "avg_fish_per_cell",
    "tick_ms",
    "tick_ms_per_fish",
]


def _format_basic_row(metrics: TickMetrics, tick_ms: float) -> list[object]:
    return [
        metrics.tick,
        metrics.population,
        metrics.social,
        f"{metrics.average_density:.4f}",
        f"{metrics.average_speed:.4f}",
        f"{metrics.average_stress:.4f}",
        f"{tick_ms:.3f}",
    ]


def _format_detailed_row(metrics: TickMetrics, tick_ms: float) -> list[object]:
    population = metrics.population
    if population <= 0:
        social_ratio = 0.0
        tick_ms_per_fish = 0.0
    else:
        social_ratio = metrics.social / population
        tick_ms_per_fish = tick_ms / population
    avg_fish_per_cell = population / metrics.occupied_cells if metrics.occupied_cells > 0 else 0.0
    return [
        metrics.tick,
        population,
        metrics.social,
        population - metrics.social,
        f"{social_ratio:.4f}",
        f"{metrics.average_density:.4f}",
        metrics.max_density,
        f"{metrics.average_speed:.4f}",
        f"{metrics.average_stress:.4f}",
        metrics.occupied_cells,
        f"{avg_fish_per_cell:.4f}",
        f"{tick_ms:.3f}",
        f"{tick_ms_per_fish:.4f}",
    ]


def _percentile(sorted_values: list[float], percentile: float) -> float:
    if not sorted_values:
        return 0.0
    if len(sorted_values) == 1:
        return float(sorted_values[0])
    pos = (len(sorted_values) - 1) * percentile
    low = int(math.floor(pos))
    high = int(math.ceil(pos))
    if low == high:
        return float(sorted_values[low])
    weight = pos - low
    return float(sorted_values[low] + (sorted_values[high] - sorted_values[low]) * weight)


def _summary_stats(values: list[float]) -> dict[str, float]:
    if not values:
        return {"min": 0.0, "max": 0.0, "avg": 0.0, "p50": 0.0, "p90": 0.0, "p99": 0.0}
    sorted_values = sorted(values)
    return {
        "min": float(sorted_values[0]),
        "max": float(sorted_values[-1]),
        "avg": float(sum(values) / len(values)),
        "p50": _percentile(sorted_values, 0.50),
        "p90": _percentile(sorted_values, 0.90),
        "p99": _percentile(sorted_values, 0.99),
    }


def run_headless(
    steps: int,
    seed: Optional[int],
    log_path: Optional[Path],
    deterministic_log: bool = False,
    log_format: str = "detailed",
    summary_path: Optional[Path] = None,
    summary_window: int = 500,
    entity_count: Optional[int] = None,
    app_config: Optional[AppConfig] = None,
) -> ShoalSimulator:
    log_mode = log_format.lower().strip()
    if log_mode not in {"basic", "detailed"}:
        raise ValueError(f"Unknown log format: {log_format}")

    app_config = app_config if app_config is not None else AppConfig()
    config: ShoalConfig = replace(app_config.simulation)
    if entity_count is not None:
        config.entity_count = entity_count
    engine: EngineConfig = replace(app_config.engine)
    if seed is not None:
        engine.seed = seed
    if engine.fixed_time_step is None:
        engine.fixed_time_step = DEFAULT_TIME_STEP
    simulator = ShoalSimulator(config, engine)

    writer = None
    csv_file = None
    if log_path:
        csv_file = Path(log_path).open("w", newline="")
        writer = csv.writer(csv_file)
        writer.writerow(_DETAILED_HEADER if log_mode == "detailed" else _BASIC_HEADER)

    tick_ms_series: list[float] = []
    social_ratio_series: list[float] = []
    density_series: list[float] = []

    try:
        for _ in range(steps):
            simulator.run(lambda snapshot: config)
            metrics = simulator.metrics
            tick_ms = 0.0 if deterministic_log else metrics.tick_duration_ms
            if summary_path:
                tick_ms_series.append(tick_ms)
                social_ratio_series.append(
                    0.0 if metrics.population <= 0 else metrics.social / metrics.population
                )
                density_series.append(metrics.average_density)
            if writer:
                if log_mode == "detailed":
                    writer.writerow(_format_detailed_row(metrics, tick_ms))
                else:
                    writer.writerow(_format_basic_row(metrics, tick_ms))
    finally:
        if csv_file:
            csv_file.close()

    if summary_path:
        window = max(1, int(summary_window))
        tail = slice(max(0, len(tick_ms_series) - window), len(tick_ms_series))
        summary = {
            "steps": steps,
            "seed": engine.seed,
            "population": simulator.population,
            "log_format": log_mode,
            "deterministic_log": deterministic_log,
            "tick_ms": _summary_stats(tick_ms_series),
            "social_ratio": _summary_stats(social_ratio_series),
            "average_density": _summary_stats(density_series),
            "tail_window": {
                "window": window,
                "tick_ms": _summary_stats(tick_ms_series[tail]),
                "social_ratio": _summary_stats(social_ratio_series[tail]),
                "average_density": _summary_stats(density_series[tail]),
            },
        }
        Path(summary_path).write_text(json.dumps(summary, indent=2))
    return simulator


def main() -> None:
    parser = argparse.ArgumentParser(description="Headless fish shoal simulation")
    parser.add_argument("--steps", type=int, default=1000)
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--entities", type=int, default=None, help="Override the fish population.")
    parser.add_argument("--config", type=Path, default=None, help="YAML file with simulation/engine settings")
    parser.add_argument("--log", type=Path, default=None, help="CSV file to write metrics")
    parser.add_argument(
        "--log-format",
        choices=["basic", "detailed"],
        default="detailed",
        help="CSV format to write when --log is provided.",
    )
    parser.add_argument("--summary", type=Path, default=None, help="Optional JSON file to write summary stats.")
    parser.add_argument("--summary-window", type=int, default=500, help="Tail window size (ticks) for summary stats.")
    parser.add_argument(
        "--deterministic-log",
        action="store_true",
        help="Write deterministic CSV (tick_ms is forced to 0.000 so identical seeds match).",
    )
    parser.add_argument("--log-level", default=None, help="Logging level (defaults to SHOAL_LOG_LEVEL or INFO).")
    args = parser.parse_args()
    app_config = AppConfig.from_yaml(args.config) if args.config else AppConfig()
    configure_logging(level=args.log_level or (app_config.log_level if args.config else None))
    run_headless(
        args.steps,
        args.seed,
        args.log,
        deterministic_log=args.deterministic_log,
        log_format=args.log_format,
        summary_path=args.summary,
        summary_window=args.summary_window,
        entity_count=args.entities,
        app_config=app_config,
    )


if __name__ == "__main__":
    main()
