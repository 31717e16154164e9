from __future__ import annotations

import asyncio
import json
import logging
import sys
from typing import Any, Dict, List, Optional

from quakestats.events import Event, events_from_geojson, synthetic_events
from quakestats.spatial import ClusteringConfig, cluster_with_diagnostics
from quakestats.stats import aggregate_all
from quakestats.telemetry import LoggingSink
from quakestats.temporal import monthly_counts
from quakestats.tools.config_loader import AggregationSettings, get_config


def configure_logging(log_cfg: Dict[str, Any]) -> None:
    level = getattr(logging, str(log_cfg.get("level", "INFO")).upper(), logging.INFO)
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


def load_events(path: Optional[str]) -> List[Event]:
    if path is None:
        return synthetic_events(600, seed=1)
    with open(path, "r", encoding="utf-8") as f:
        return events_from_geojson(json.load(f), skip_invalid=True)


# -----------------------------
# Example entrypoint
# -----------------------------

async def run_report_example(path: Optional[str] = None) -> Dict[str, Any]:
    cfg = get_config()
    configure_logging(cfg.get("logging", {}) or {})
    sink = LoggingSink()

    cluster_cfg = cfg.get("clustering", {}) or {}
    settings = AggregationSettings.from_dict(cfg.get("aggregation"))

    events = load_events(path)

    # Both paths only share the event list
    clusters, diagnostics = cluster_with_diagnostics(
        events,
        k=int(cluster_cfg.get("k", 5)),
        seed=cluster_cfg.get("seed", 42),
        config=ClusteringConfig.from_dict(cluster_cfg),
        sink=sink,
    )
    for suggestion in diagnostics.suggestions:
        print(f"Suggestion: {suggestion}")

    populated = [c for c in clusters if not c.is_empty]
    stats = await aggregate_all(
        populated,
        settings.significance_threshold,
        max_concurrency=settings.max_concurrency,
        sink=sink,
    )
    per_month = monthly_counts(events, sink=sink)

    report = {
        "num_events": len(events),
        "silhouette": diagnostics.silhouette_score,
        "clusters": [s.to_dict() for s in stats],
        "monthly": per_month.to_dict(orient="records"),
    }
    print(json.dumps(report, ensure_ascii=False, indent=2))
    return report


if __name__ == "__main__":
    asyncio.run(run_report_example(sys.argv[1] if len(sys.argv) > 1 else None))
