"""
Aggregate views over canonical records.

Every function here is a pure function of its input: it builds fresh lists
on each call and keeps nothing between calls. Sorting is stable, so ties
keep the order in which groups were first seen.
"""

from __future__ import annotations

import logging
import math
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple, Type, TypeVar

from .models import (
    AggregateViews,
    BenchmarkSetting,
    CanonicalRecord,
    CountEntry,
    CpuBreakdownEntry,
    CpuFrequencyEntry,
    FpsRangeBucket,
    GpuPerformanceEntry,
    RayTracingEntry,
    RecordFilter,
    ResolutionEntry,
    ResolutionPerformance,
    ResolutionPerformanceEntry,
    SummaryStats,
    UpscalingEntry,
    VerdictEntry,
)
from .rules import (
    DEFAULT_RAY_TRACING,
    DEFAULT_UPSCALING,
    FILTER_ALL,
    FPS_BUCKETS,
    GPU_BRAND_TOKENS,
    RESOLUTION_TABLE_MIN_SAMPLES,
    TOP_CPUS,
    TOP_GPUS,
    TOP_RESOLUTIONS,
    UNKNOWN,
)

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=CountEntry)


def round_half_up(value: float, digits: int = 2) -> float:
    """Round like a spreadsheet does (0.125 -> 0.13), not banker's rounding."""
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def _mean(values: Sequence[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def _count_by(
    records: Iterable[CanonicalRecord],
    key: Callable[[CanonicalRecord], Optional[str]],
    entry_type: Type[E],
    limit: Optional[int] = None,
) -> List[E]:
    counts: Dict[str, int] = {}
    for record in records:
        name = key(record)
        if not name:
            continue
        counts[name] = counts.get(name, 0) + 1

    entries = [entry_type(name=name, count=count) for name, count in counts.items()]
    entries.sort(key=lambda e: e.count, reverse=True)
    return entries[:limit] if limit is not None else entries


def gpu_performance(records: Iterable[CanonicalRecord]) -> List[GpuPerformanceEntry]:
    groups: Dict[str, List[float]] = {}
    for record in records:
        groups.setdefault(record.gpu, []).append(record.avg_fps)

    entries = [
        GpuPerformanceEntry(name=gpu, avg_fps=round_half_up(_mean(fps)), sample_count=len(fps))
        for gpu, fps in groups.items()
        if len(fps) >= 1
    ]
    entries.sort(key=lambda e: e.avg_fps, reverse=True)
    return entries[:TOP_GPUS]


def cpu_frequency(records: Iterable[CanonicalRecord]) -> List[CpuFrequencyEntry]:
    return _count_by(records, lambda r: r.cpu, CpuFrequencyEntry, TOP_CPUS)


def verdict_distribution(records: Iterable[CanonicalRecord]) -> List[VerdictEntry]:
    # rows without a verdict are not part of the distribution
    return _count_by(records, lambda r: r.verdict, VerdictEntry)


def ray_tracing_distribution(records: Iterable[CanonicalRecord]) -> List[RayTracingEntry]:
    return _count_by(records, lambda r: r.ray_tracing or DEFAULT_RAY_TRACING, RayTracingEntry)


def upscaling_distribution(records: Iterable[CanonicalRecord]) -> List[UpscalingEntry]:
    return _count_by(records, lambda r: r.upscaling or DEFAULT_UPSCALING, UpscalingEntry)


def resolution_distribution(records: Iterable[CanonicalRecord]) -> List[ResolutionEntry]:
    return _count_by(records, lambda r: r.resolution or UNKNOWN, ResolutionEntry, TOP_RESOLUTIONS)


def _bucket_index(fps: float) -> Optional[int]:
    # Bounds are inclusive integers; a fractional value between two buckets
    # belongs to the lower one.
    found = None
    for i, (_, low, _) in enumerate(FPS_BUCKETS):
        if fps >= low:
            found = i
    return found


def fps_ranges(records: Iterable[CanonicalRecord]) -> List[FpsRangeBucket]:
    counts = [0] * len(FPS_BUCKETS)
    for record in records:
        if math.isnan(record.avg_fps):
            continue
        i = _bucket_index(record.avg_fps)
        if i is not None:
            counts[i] += 1

    return [
        FpsRangeBucket(range_label=label, min_fps=low, max_fps=high, count=count)
        for (label, low, high), count in zip(FPS_BUCKETS, counts)
    ]


def aggregate(records: Sequence[CanonicalRecord]) -> AggregateViews:
    """Compute all seven views from the same record set."""
    views = AggregateViews(
        gpu_performance=gpu_performance(records),
        cpu_frequency=cpu_frequency(records),
        verdicts=verdict_distribution(records),
        ray_tracing=ray_tracing_distribution(records),
        resolutions=resolution_distribution(records),
        fps_ranges=fps_ranges(records),
        upscaling=upscaling_distribution(records),
    )
    logger.debug(
        "Aggregated %d records: %d gpus, %d cpus, %d verdicts, %d rt, %d resolutions, %d upscalers",
        len(records),
        len(views.gpu_performance),
        len(views.cpu_frequency),
        len(views.verdicts),
        len(views.ray_tracing),
        len(views.resolutions),
        len(views.upscaling),
    )
    return views


def _matches_brand(gpu: str, brand: str) -> bool:
    tokens = GPU_BRAND_TOKENS.get(brand)
    if tokens is None:
        return True
    upper = gpu.upper()
    return any(token in upper for token in tokens)


def filter_records(records: Iterable[CanonicalRecord], record_filter: RecordFilter) -> List[CanonicalRecord]:
    """
    Narrow a record set the way the dashboard filter controls do.

    Each criterion left at "All" is ignored. The brand filter matches on
    tokens of the canonical GPU name (RTX/GTX for NVIDIA, RX/Radeon for AMD,
    Arc for Intel); an unknown brand does not filter anything.
    """
    exact: List[Tuple[str, str]] = [
        (field, value)
        for field, value in (
            ("upscaling", record_filter.upscaling),
            ("graphics_settings", record_filter.graphics_settings),
            ("ray_tracing", record_filter.ray_tracing),
            ("frame_generation", record_filter.frame_generation),
        )
        if value != FILTER_ALL
    ]
    brand = record_filter.gpu_brand

    out = []
    for record in records:
        if any(getattr(record, field) != value for field, value in exact):
            continue
        if brand != FILTER_ALL and not _matches_brand(record.gpu, brand):
            continue
        out.append(record)
    return out


def summarize(records: Sequence[CanonicalRecord], views: Optional[AggregateViews] = None) -> SummaryStats:
    if views is None:
        views = aggregate(records)

    return SummaryStats(
        total_entries=len(records),
        avg_fps=_mean([r.avg_fps for r in records]),
        avg_score=_mean([r.score for r in records]),
        top_gpu=views.gpu_performance[0].name if views.gpu_performance else "N/A",
    )


def _is_ultrawide(resolution: str) -> bool:
    return "3440x1440" in resolution or "ultrawide" in resolution.lower()


def _is_full_hd(resolution: str) -> bool:
    return "1920x1080" in resolution or "1080p" in resolution.lower()


def resolution_performance(records: Iterable[CanonicalRecord]) -> ResolutionPerformance:
    groups: Dict[str, List[float]] = {}
    for record in records:
        if record.resolution:
            groups.setdefault(record.resolution, []).append(record.avg_fps)

    entries = [
        ResolutionPerformanceEntry(resolution=res, avg_fps=round_half_up(_mean(fps), 1), sample_size=len(fps))
        for res, fps in groups.items()
        if len(fps) >= RESOLUTION_TABLE_MIN_SAMPLES
    ]
    entries.sort(key=lambda e: e.sample_size, reverse=True)

    anomaly = False
    if len(entries) >= 3:
        ultrawide = next((e for e in entries if _is_ultrawide(e.resolution)), None)
        full_hd = next((e for e in entries if _is_full_hd(e.resolution)), None)
        anomaly = bool(ultrawide and full_hd and ultrawide.avg_fps > full_hd.avg_fps)

    return ResolutionPerformance(entries=entries, ultrawide_anomaly=anomaly)


def gpu_cpu_breakdown(records: Iterable[CanonicalRecord], gpu: str) -> List[CpuBreakdownEntry]:
    """Per-CPU results for one canonical GPU, best average FPS first."""
    groups: Dict[str, List[CanonicalRecord]] = {}
    for record in records:
        if record.gpu == gpu:
            groups.setdefault(record.cpu, []).append(record)

    entries = [
        CpuBreakdownEntry(
            cpu=cpu,
            avg_fps=round_half_up(_mean([r.avg_fps for r in rows])),
            avg_score=round_half_up(_mean([r.score for r in rows])),
            sample_count=len(rows),
            settings=[
                BenchmarkSetting(
                    resolution=r.resolution,
                    graphics_settings=r.graphics_settings,
                    ray_tracing=r.ray_tracing,
                    upscaling=r.upscaling,
                    frame_generation=r.frame_generation,
                    avg_fps=r.avg_fps,
                    score=r.score,
                )
                for r in rows
            ],
        )
        for cpu, rows in groups.items()
    ]
    entries.sort(key=lambda e: e.avg_fps, reverse=True)
    return entries
