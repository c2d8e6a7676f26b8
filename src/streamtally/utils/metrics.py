import structlog
from typing import Dict, Optional
from prometheus_client import REGISTRY, CollectorRegistry, write_to_textfile


logger = structlog.get_logger("metrics")


METRIC_PREFIX = "streamtally_"


def counter_totals(registry: CollectorRegistry = REGISTRY) -> Dict[str, float]:
    totals = {}
    for metric in registry.collect():
        if metric.type != "counter" or not metric.name.startswith(METRIC_PREFIX):
            continue
        for sample in metric.samples:
            if sample.name.endswith("_total"):
                totals[sample.name] = sample.value
    return totals


def publish(textfile: Optional[str] = None, registry: CollectorRegistry = REGISTRY):
    """
    One-shot processes have no scrape endpoint: totals go to the log and,
    when a path is configured, to a node_exporter textfile.
    """
    logger.info("run_metrics", **counter_totals(registry))

    if textfile:
        write_to_textfile(textfile, registry)
        logger.info("metrics_textfile_written", path=textfile)
