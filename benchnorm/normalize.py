"""
Ingestion of the crowdsourced benchmark spreadsheet export.

Responsibilities:
- encoding detection + newline normalization
- quote-aware line tokenizing
- header row discovery
- positional record extraction with per-field defaults
- canonicalization of hardware/technology names

Row-level defects are absorbed (row dropped or field defaulted). Only
structurally broken input raises an ``IngestError``.
"""

from __future__ import annotations

import logging
import math
import re
from typing import Any, Dict, List, Optional, Sequence, Tuple

from charset_normalizer import from_bytes

from .aggregate import aggregate, resolution_performance, summarize
from .canonical import (
    canonicalize_cpu,
    canonicalize_gpu,
    canonicalize_upscaling,
    canonicalize_verdict,
)
from .errors import EmptyInput, MissingRequiredColumns, NoValidRows
from .models import CanonicalRecord, IngestReport, IngestResult, SkipCounts
from .rules import (
    COL_AVG_FPS,
    COL_CPU,
    COL_FRAME_GEN,
    COL_GPU,
    COL_GRAPHICS,
    COL_RAY_TRACING,
    COL_RESOLUTION,
    COL_SCORE,
    COL_UPSCALING,
    COL_VERDICT,
    DEFAULT_FRAME_GEN,
    DEFAULT_HEADER_INDEX,
    DEFAULT_RAY_TRACING,
    HEADER_MARKERS,
    HEADER_SCAN_LIMIT,
    KNOWN_COLUMNS,
    REQUIRED_COLUMNS,
)

logger = logging.getLogger(__name__)

_NUMBER_PREFIX_RE = re.compile(r"^\s*[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")


def decode_text(raw: bytes) -> Tuple[str, Dict[str, Any]]:
    """
    Decode uploaded bytes into text with LF newlines.

    Rules:
    - Detect encoding best-effort via charset-normalizer.
    - If decode fails, fall back to UTF-8, then UTF-8 with replacement characters.
    - A leading UTF-8 BOM never reaches the text.
    - CRLF/CR -> LF.
    """
    detected = None

    match = from_bytes(raw).best()
    if match is not None:
        detected = match.encoding

    decode_used = detected or "utf-8"
    if raw.startswith(b"\xef\xbb\xbf") and (decode_used.lower().replace("-", "_") in ("utf_8", "utf8")):
        decode_used = "utf-8-sig"

    decode_fallback = False

    try:
        text = raw.decode(decode_used)
    except (UnicodeDecodeError, LookupError):
        try:
            text = raw.decode("utf-8-sig")
            decode_used = "utf-8-sig"
        except UnicodeDecodeError:
            # Last resort: keep going with replacement characters
            text = raw.decode("utf-8", errors="replace")
            decode_used = "utf-8"
        decode_fallback = True

    text = text.lstrip("\ufeff")

    nl_before = {
        "crlf": text.count("\r\n"),
        "cr": text.count("\r") - text.count("\r\n"),
    }
    text = normalize_newlines(text)

    report = {
        "detected": detected,
        "decode_used": decode_used,
        "decode_fallback": decode_fallback,
        "newlines_changed": (nl_before["crlf"] > 0) or (nl_before["cr"] > 0),
    }
    logger.debug("Decoded %d bytes as %s (fallback=%s)", len(raw), decode_used, decode_fallback)
    return text, report


def normalize_newlines(text: str) -> str:
    return text.replace("\r\n", "\n").replace("\r", "\n")


def tokenize(line: str) -> List[str]:
    """
    Split one CSV line on commas outside double quotes.

    Quote characters only toggle the quoted state and are dropped; a doubled
    quote is two toggles, not an escaped quote. Never raises.
    """
    fields: List[str] = []
    current: List[str] = []
    in_quotes = False

    for ch in line:
        if ch == '"':
            in_quotes = not in_quotes
        elif ch == "," and not in_quotes:
            fields.append("".join(current))
            current = []
        else:
            current.append(ch)

    fields.append("".join(current))
    return fields


def locate_header(lines: Sequence[str]) -> int:
    """Index of the column-header row; line 0 is the sheet's instruction row."""
    for i in range(1, min(HEADER_SCAN_LIMIT, len(lines))):
        line = lines[i]
        if all(marker in line for marker in HEADER_MARKERS):
            return i

    logger.warning("Could not find header row, defaulting to line %d", DEFAULT_HEADER_INDEX)
    return DEFAULT_HEADER_INDEX


def parse_number(value: str) -> float:
    """Leading decimal prefix of ``value``; anything unusable is 0."""
    m = _NUMBER_PREFIX_RE.match(value)
    if not m:
        return 0.0
    number = float(m.group(0))
    if not math.isfinite(number) or number < 0:
        return 0.0
    return number


def resolve_columns(header_line: str) -> Dict[str, int]:
    headers = [h.strip() for h in tokenize(header_line)]
    columns: Dict[str, int] = {}
    for name in KNOWN_COLUMNS:
        if name in headers:
            columns[name] = headers.index(name)

    missing = [name for name in REQUIRED_COLUMNS if name not in columns]
    if missing:
        raise MissingRequiredColumns(missing)
    return columns


def _cell(fields: List[str], index: Optional[int]) -> str:
    if index is None or index >= len(fields):
        return ""
    return fields[index].strip()


def build_records_with_report(
    lines: Sequence[str], header_index: int
) -> Tuple[List[CanonicalRecord], SkipCounts, Dict[str, int]]:
    header_line = lines[header_index] if 0 <= header_index < len(lines) else ""
    columns = resolve_columns(header_line)
    logger.debug("Resolved columns: %s", columns)

    gpu_idx = columns[COL_GPU]
    cpu_idx = columns[COL_CPU]
    col = columns.get

    records: List[CanonicalRecord] = []
    skipped = SkipCounts()

    for raw_line in lines[header_index + 1:]:
        line = raw_line.strip()
        if not line:
            skipped.blank_lines += 1
            continue

        fields = tokenize(line)
        if len(fields) <= gpu_idx or len(fields) <= cpu_idx:
            skipped.short_rows += 1
            continue

        gpu = fields[gpu_idx].strip()
        cpu = fields[cpu_idx].strip()
        if not gpu or not cpu:
            skipped.missing_gpu_or_cpu += 1
            continue

        verdict = _cell(fields, col(COL_VERDICT))

        records.append(
            CanonicalRecord(
                gpu=canonicalize_gpu(gpu),
                cpu=canonicalize_cpu(cpu),
                resolution=_cell(fields, col(COL_RESOLUTION)),
                graphics_settings=_cell(fields, col(COL_GRAPHICS)),
                ray_tracing=_cell(fields, col(COL_RAY_TRACING)) or DEFAULT_RAY_TRACING,
                frame_generation=_cell(fields, col(COL_FRAME_GEN)) or DEFAULT_FRAME_GEN,
                upscaling=canonicalize_upscaling(_cell(fields, col(COL_UPSCALING))),
                avg_fps=parse_number(_cell(fields, col(COL_AVG_FPS))),
                score=parse_number(_cell(fields, col(COL_SCORE))),
                verdict=canonicalize_verdict(verdict) if verdict else "",
            )
        )

    return records, skipped, columns


def build_records(lines: Sequence[str], header_index: int) -> List[CanonicalRecord]:
    records, _, _ = build_records_with_report(lines, header_index)
    return records


def ingest_text(text: str, source: str = "", decoding: Optional[Dict[str, Any]] = None) -> IngestResult:
    """
    Run the whole pipeline over already-decoded text.

    Raises EmptyInput, MissingRequiredColumns or NoValidRows; every other
    defect is absorbed and counted in the report.
    """
    if not text or not text.strip():
        raise EmptyInput("Received empty data from the source")

    lines = normalize_newlines(text).split("\n")
    if len(lines) < 2:
        raise EmptyInput("CSV file does not have enough rows")

    header_index = locate_header(lines)
    header_fallback = not (
        header_index < len(lines) and all(m in lines[header_index] for m in HEADER_MARKERS)
    )
    logger.info("Using header row at index %d for %s", header_index, source or "<unnamed>")

    records, skipped, columns = build_records_with_report(lines, header_index)
    if not records:
        raise NoValidRows()

    logger.info("Parsed %d rows from %s", len(records), source or "<unnamed>")

    views = aggregate(records)
    report = IngestReport(
        header_index=header_index,
        header_fallback=header_fallback,
        columns=columns,
        lines_read=len(lines),
        rows_accepted=len(records),
        skipped=skipped,
        decoding=decoding or {},
    )

    return IngestResult(
        source=source,
        records=records,
        views=views,
        summary=summarize(records, views),
        resolution_performance=resolution_performance(records),
        report=report,
    )


def ingest_bytes(raw: bytes, source: str = "") -> IngestResult:
    text, decoding = decode_text(raw)
    return ingest_text(text, source, decoding=decoding)
