"""End-to-end dry run: scan, classify, resolve and format, timing each phase."""

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from mediasort.classifier import classify, non_custom_device_names
from mediasort.config import Config, validate_config
from mediasort.extractor.reader import MetadataReader
from mediasort.models import ExecutionPlan, SupportedFile
from mediasort.planner import Planner
from mediasort.report.formatter import LayoutFormatter
from mediasort.report.statistics import (
    PHASE_CLASSIFICATION,
    PHASE_FORMATTING,
    PHASE_RESOLUTION,
    PHASE_SCANNING,
    Statistics,
    aggregate,
)
from mediasort.scanner import DirectoryListing, Scanner, ScanResult, list_directory

logger = logging.getLogger(__name__)


@dataclass
class PipelineReport:
    scan: ScanResult
    files: list[SupportedFile]
    plan: ExecutionPlan
    preview: list[str]
    statistics: Statistics
    non_custom_devices: list[str]

    @property
    def unknown_extensions(self) -> list[str]:
        return sorted({ext for ext in self.plan.unsupported_extensions.values() if ext})


def run_pipeline(
    config: Config,
    reader: MetadataReader,
    lister: Callable[[Path], DirectoryListing] = list_directory,
    planner: Planner | None = None,
) -> PipelineReport:
    """Run every phase of a dry run and collect the results.

    Raises:
        InvalidPolicyError: If the configuration is invalid. Nothing is scanned.
    """
    validate_config(config)
    durations: dict[str, float] = {}

    start = time.perf_counter()
    scan = Scanner(config, reader, lister).scan()
    durations[PHASE_SCANNING] = time.perf_counter() - start

    start = time.perf_counter()
    files = [classify(raw, config) for raw in scan.files]
    durations[PHASE_CLASSIFICATION] = time.perf_counter() - start

    start = time.perf_counter()
    plan = (planner or Planner(config)).plan(files)
    durations[PHASE_RESOLUTION] = time.perf_counter() - start

    start = time.perf_counter()
    preview = [] if plan.is_empty else LayoutFormatter(config, scan.has_multiple_sources).render(plan)
    durations[PHASE_FORMATTING] = time.perf_counter() - start

    logger.debug("Phase durations: %s", durations)

    return PipelineReport(
        scan=scan,
        files=files,
        plan=plan,
        preview=preview,
        statistics=aggregate(plan, scan, durations),
        non_custom_devices=non_custom_device_names(files, config),
    )
