"""
Ingestion, canonicalization and aggregation of crowdsourced GPU/CPU
benchmark spreadsheet exports.
"""
from .aggregate import aggregate, filter_records, gpu_cpu_breakdown, resolution_performance, summarize
from .canonical import canonicalize_cpu, canonicalize_gpu, canonicalize_upscaling, canonicalize_verdict
from .errors import EmptyInput, IngestError, MissingRequiredColumns, NoValidRows
from .normalize import build_records, ingest_bytes, ingest_text, locate_header, tokenize

__all__ = [
    "aggregate",
    "filter_records",
    "gpu_cpu_breakdown",
    "resolution_performance",
    "summarize",
    "canonicalize_cpu",
    "canonicalize_gpu",
    "canonicalize_upscaling",
    "canonicalize_verdict",
    "EmptyInput",
    "IngestError",
    "MissingRequiredColumns",
    "NoValidRows",
    "build_records",
    "ingest_bytes",
    "ingest_text",
    "locate_header",
    "tokenize",
]
