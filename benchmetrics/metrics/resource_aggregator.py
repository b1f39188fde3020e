"""Aggregation of Quarkus runtime resource gauges across metric scrapes.

The integration benchmark scrapes the service's Prometheus endpoint after each
benchmark group. CPU gauges are averaged and maximised over all scrapes; JVM
memory pools keep their last value per `area:id` and are then summed per area.
"""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import pandas as pd
from loguru import logger

from .file_processor import MetricsFileProcessor, split_key
from .json_exporter import QUARKUS_METRICS_FILE, MetricsJsonExporter, format_number, format_percentage

QUARKUS_FILE_MARKERS = ("jwt-health", "jwt-validation", "finalcumulativemetrics")
QUARKUS_FILE_SUFFIX = "-metrics.txt"

CPU_GAUGES = ("system_cpu_usage", "process_cpu_usage", "system_load_average_1m", "system_cpu_count")
MEMORY_GAUGES = ("jvm_memory_used_bytes", "jvm_memory_committed_bytes", "jvm_memory_max_bytes")


def is_quarkus_metrics_file(path: Path) -> bool:
    name = path.name
    return name.endswith(QUARKUS_FILE_SUFFIX) and any(m in name for m in QUARKUS_FILE_MARKERS)


class QuarkusMetricsAggregator:
    """Builds quarkus-metrics.json from the scrape files in a directory."""

    def __init__(self, metrics_dir: Path | str, output_dir: Path | str):
        self.metrics_dir = Path(metrics_dir)
        self.exporter = MetricsJsonExporter(output_dir)

    def collect_samples(self) -> tuple[pd.DataFrame, int]:
        """Read matching scrape files into one frame of resource samples.

        Returns:
            Tuple of (samples frame with columns order/metric/area/id/value,
            number of files processed)
        """
        rows: list[dict[str, Any]] = []
        files_processed = 0
        processor = MetricsFileProcessor(self.metrics_dir)

        for path, metrics in processor.iter_files():
            if not is_quarkus_metrics_file(path):
                continue
            files_processed += 1
            logger.debug(f"Processing Quarkus metrics file: {path.name}")
            for key, value in metrics.items():
                name, labels = split_key(key)
                if name not in CPU_GAUGES and name not in MEMORY_GAUGES:
                    continue
                label_map = dict(labels)
                rows.append(
                    {
                        "order": files_processed,
                        "metric": name,
                        "area": label_map.get("area"),
                        "id": label_map.get("id"),
                        "value": value,
                    }
                )

        frame = pd.DataFrame(rows, columns=["order", "metric", "area", "id", "value"])
        return frame, files_processed

    @staticmethod
    def _avg_max(samples: pd.DataFrame, metric: str) -> tuple[float, float]:
        values = samples.loc[samples["metric"] == metric, "value"].dropna()
        if values.empty:
            return 0.0, 0.0
        return float(values.mean()), float(values.max())

    @classmethod
    def summarize_cpu(cls, samples: pd.DataFrame) -> dict[str, Any]:
        system_avg, system_max = cls._avg_max(samples, "system_cpu_usage")
        process_avg, process_max = cls._avg_max(samples, "process_cpu_usage")
        load_avg, load_max = cls._avg_max(samples, "system_load_average_1m")
        counts = samples.loc[samples["metric"] == "system_cpu_count", "value"]

        return {
            "system_cpu_usage_avg": format_percentage(system_avg),
            "system_cpu_usage_max": format_percentage(system_max),
            "process_cpu_usage_avg": format_percentage(process_avg),
            "process_cpu_usage_max": format_percentage(process_max),
            "cpu_count": int(counts.iloc[-1]) if not counts.empty else 0,
            "load_average_1m_avg": format_number(load_avg),
            "load_average_1m_max": format_number(load_max),
        }

    @staticmethod
    def summarize_memory(samples: pd.DataFrame) -> dict[str, Any]:
        memory_rows = samples[samples["metric"].isin(MEMORY_GAUGES)]
        if memory_rows.empty:
            latest = memory_rows
        else:
            latest = (
                memory_rows.sort_values("order", kind="stable")
                .groupby(["metric", "area", "id"], dropna=False)
                .tail(1)
            )
            # Unlimited pools report -1 as their max
            is_max = latest["metric"] == "jvm_memory_max_bytes"
            latest = latest[~is_max | (latest["value"] > 0)]

        memory: dict[str, Any] = {}
        for area in ("heap", "nonheap"):
            area_rows = latest[latest["area"] == area]
            totals = area_rows.groupby("metric")["value"].sum()
            section: dict[str, Any] = {
                "used_bytes": int(totals.get("jvm_memory_used_bytes", 0)),
                "committed_bytes": int(totals.get("jvm_memory_committed_bytes", 0)),
            }
            max_bytes = int(totals.get("jvm_memory_max_bytes", 0))
            if max_bytes > 0:
                section["max_bytes"] = max_bytes
                section["usage_percentage"] = format_percentage(section["used_bytes"] / max_bytes)
            memory[area] = section
        return memory

    def parse_and_export(self, timestamp: str | None = None) -> Path | None:
        """Aggregate all matching scrape files and write quarkus-metrics.json.

        Returns:
            Path of the written document, or None when there is nothing to aggregate
        """
        timestamp = timestamp or datetime.now(timezone.utc).isoformat()
        logger.info(f"Parsing Quarkus metrics from directory: {self.metrics_dir}")

        samples, files_processed = self.collect_samples()
        if files_processed == 0:
            logger.warning(f"No Quarkus metrics files found in {self.metrics_dir}")
            return None

        document = {
            "cpu": self.summarize_cpu(samples),
            "memory": self.summarize_memory(samples),
            "metadata": {
                "timestamp": timestamp,
                "files_processed": files_processed,
                "source": "Quarkus metrics - Prometheus format",
            },
        }
        target = self.exporter.update_aggregated_metrics(
            QUARKUS_METRICS_FILE, "quarkus-runtime-metrics", document
        )
        logger.info(f"Exported Quarkus metrics from {files_processed} files")
        return target
