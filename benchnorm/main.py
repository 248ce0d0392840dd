from typing import List, Optional

from fastapi import FastAPI, UploadFile, File, Form, HTTPException
from .aggregate import aggregate, filter_records, gpu_cpu_breakdown, resolution_performance, summarize
from .errors import IngestError
from .models import (
    AggregateRequest,
    AggregateResponse,
    BreakdownRequest,
    CpuBreakdownEntry,
    HealthResponse,
    IngestResult,
)
from .normalize import ingest_bytes

app = FastAPI(
    title="benchmark-normalizer",
    description="Ingestion, canonicalization and aggregation of crowdsourced GPU/CPU benchmark sheets",
    version="0.1.0",
)

@app.get("/health", response_model=HealthResponse)
def health():
    return {"ok": True}

@app.post("/ingest", response_model=IngestResult)
async def ingest_csv(file: UploadFile = File(...), source: Optional[str] = Form(default=None)):
    if not file.filename.lower().endswith(".csv"):
        raise HTTPException(status_code=422, detail="Only CSV files are supported")

    raw = await file.read()
    try:
        return ingest_bytes(raw, source or file.filename)
    except IngestError as exc:
        raise HTTPException(status_code=422, detail=str(exc))

@app.post("/aggregate", response_model=AggregateResponse)
def aggregate_records(req: AggregateRequest):
    records = filter_records(req.records, req.filters)
    views = aggregate(records)
    return AggregateResponse(
        views=views,
        summary=summarize(records, views),
        resolution_performance=resolution_performance(records),
    )

@app.post("/gpu-breakdown", response_model=List[CpuBreakdownEntry])
def gpu_breakdown(req: BreakdownRequest):
    return gpu_cpu_breakdown(req.records, req.gpu)
