from __future__ import annotations

from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field

from .rules import (
    DEFAULT_FRAME_GEN,
    DEFAULT_RAY_TRACING,
    DEFAULT_UPSCALING,
    FILTER_ALL,
)


class CanonicalRecord(BaseModel):
    gpu: str = Field(min_length=1)
    cpu: str = Field(min_length=1)
    resolution: str = ""
    graphics_settings: str = ""
    ray_tracing: str = DEFAULT_RAY_TRACING
    frame_generation: str = DEFAULT_FRAME_GEN
    upscaling: str = DEFAULT_UPSCALING
    avg_fps: float = Field(default=0.0, ge=0)
    score: float = Field(default=0.0, ge=0)
    verdict: str = ""


class GpuPerformanceEntry(BaseModel):
    name: str
    avg_fps: float
    sample_count: int


class CountEntry(BaseModel):
    name: str
    count: int


class CpuFrequencyEntry(CountEntry):
    pass


class VerdictEntry(CountEntry):
    pass


class RayTracingEntry(CountEntry):
    pass


class ResolutionEntry(CountEntry):
    pass


class UpscalingEntry(CountEntry):
    pass


class FpsRangeBucket(BaseModel):
    range_label: str
    min_fps: float
    max_fps: Optional[float] = Field(default=None, examples=[None])
    count: int = 0


class AggregateViews(BaseModel):
    gpu_performance: List[GpuPerformanceEntry] = Field(default_factory=list)
    cpu_frequency: List[CpuFrequencyEntry] = Field(default_factory=list)
    verdicts: List[VerdictEntry] = Field(default_factory=list)
    ray_tracing: List[RayTracingEntry] = Field(default_factory=list)
    resolutions: List[ResolutionEntry] = Field(default_factory=list)
    fps_ranges: List[FpsRangeBucket] = Field(default_factory=list)
    upscaling: List[UpscalingEntry] = Field(default_factory=list)


class SummaryStats(BaseModel):
    total_entries: int = 0
    avg_fps: float = 0.0
    avg_score: float = 0.0
    top_gpu: str = "N/A"


class ResolutionPerformanceEntry(BaseModel):
    resolution: str
    avg_fps: float
    sample_size: int


class ResolutionPerformance(BaseModel):
    entries: List[ResolutionPerformanceEntry] = Field(default_factory=list)
    ultrawide_anomaly: bool = False


class BenchmarkSetting(BaseModel):
    resolution: str
    graphics_settings: str
    ray_tracing: str
    upscaling: str
    frame_generation: str
    avg_fps: float
    score: float


class CpuBreakdownEntry(BaseModel):
    cpu: str
    avg_fps: float
    avg_score: float
    sample_count: int
    settings: List[BenchmarkSetting] = Field(default_factory=list)


class RecordFilter(BaseModel):
    upscaling: str = FILTER_ALL
    graphics_settings: str = FILTER_ALL
    ray_tracing: str = FILTER_ALL
    frame_generation: str = FILTER_ALL
    gpu_brand: str = FILTER_ALL


class SkipCounts(BaseModel):
    blank_lines: int = 0
    short_rows: int = 0
    missing_gpu_or_cpu: int = 0


class IngestReport(BaseModel):
    header_index: int
    header_fallback: bool = False
    columns: Dict[str, int] = Field(default_factory=dict)
    lines_read: int = 0
    rows_accepted: int = 0
    skipped: SkipCounts = Field(default_factory=SkipCounts)
    decoding: Dict[str, Any] = Field(default_factory=dict)


class IngestResult(BaseModel):
    source: str
    records: List[CanonicalRecord]
    views: AggregateViews
    summary: SummaryStats
    resolution_performance: ResolutionPerformance
    report: IngestReport


class AggregateRequest(BaseModel):
    records: List[CanonicalRecord]
    filters: RecordFilter = Field(default_factory=RecordFilter)


class AggregateResponse(BaseModel):
    views: AggregateViews
    summary: SummaryStats
    resolution_performance: ResolutionPerformance


class BreakdownRequest(BaseModel):
    records: List[CanonicalRecord]
    gpu: str


class HealthResponse(BaseModel):
    ok: bool = True
