import logging

import pytest

from benchnorm.errors import EmptyInput, MissingRequiredColumns, NoValidRows
from benchnorm.normalize import (
    build_records,
    build_records_with_report,
    decode_text,
    ingest_bytes,
    ingest_text,
    locate_header,
    parse_number,
    tokenize,
)

HEADER = (
    "GPU,CPU Model,Average FPS Score,Score,Ray Tracing,Upscaling,"
    "Screen Resolution,Graphics Settings,Frame Generation,Verdict"
)
ROW_4090 = "RTX 4090,Intel Core i9-13900K,120.5,9500,High,DLSS,2560x1440,Ultra,Enabled,Excellent."


# --- tokenizer ---

def test_tokenize_plain():
    assert tokenize("a,b,c") == ["a", "b", "c"]

def test_tokenize_quoted_comma():
    assert tokenize('a,"b,c",d') == ["a", "b,c", "d"]

def test_tokenize_empty_line():
    assert tokenize("") == [""]

def test_tokenize_keeps_trailing_empty_field():
    assert tokenize("a,b,") == ["a", "b", ""]
    assert tokenize(",") == ["", ""]

def test_tokenize_doubled_quotes_are_two_toggles():
    # not an escape: the literal quotes are lost
    assert tokenize('a,"say ""hi"", ok",b') == ["a", "say hi, ok", "b"]
    assert tokenize('a,x"",y') == ["a", "x", "y"]

def test_tokenize_unbalanced_quote_does_not_raise():
    assert tokenize('a,"b,c') == ["a", "b,c"]


# --- header locator ---

def test_locate_header_finds_first_match():
    lines = ["instructions", "", "notes", "more notes", "blank", HEADER, ROW_4090]
    assert locate_header(lines) == 5

def test_locate_header_ignores_line_zero():
    lines = [HEADER, "x", HEADER]
    assert locate_header(lines) == 2

def test_locate_header_needs_all_markers():
    lines = ["instructions", "GPU,CPU Model,FPS", "GPU,CPU Model,Screen Resolution"]
    assert locate_header(lines) == 2

def test_locate_header_fallback(caplog):
    lines = ["instructions"] + ["nothing here"] * 20
    with caplog.at_level(logging.WARNING, logger="benchnorm.normalize"):
        assert locate_header(lines) == 7
    assert "defaulting to line 7" in caplog.text

def test_locate_header_only_scans_first_fifteen_lines():
    lines = ["instructions"] + ["filler"] * 14 + [HEADER]
    assert lines.index(HEADER) == 15
    assert locate_header(lines) == 7


# --- numbers ---

@pytest.mark.parametrize(
    "raw, expected",
    [
        ("120.5", 120.5),
        ("  60", 60.0),
        ("144 fps", 144.0),
        (".5", 0.5),
        ("1e2", 100.0),
        ("", 0.0),
        ("n/a", 0.0),
        ("-12", 0.0),
        ("1e999", 0.0),
    ],
)
def test_parse_number(raw, expected):
    assert parse_number(raw) == expected


# --- record builder ---

def test_build_records_full_row():
    records = build_records(["instructions", HEADER, ROW_4090], 1)
    assert len(records) == 1

    rec = records[0]
    assert rec.gpu == "RTX 4090"
    assert rec.cpu == "Core i9-13900K"
    assert rec.avg_fps == 120.5
    assert rec.score == 9500
    assert rec.ray_tracing == "High"
    assert rec.upscaling == "DLSS"
    assert rec.resolution == "2560x1440"
    assert rec.graphics_settings == "Ultra"
    assert rec.frame_generation == "Enabled"
    assert rec.verdict == "Excellent"

def test_build_records_drops_empty_gpu_or_cpu():
    lines = [
        "instructions",
        HEADER,
        ",SomeCPU,60,100,Off,None,1920x1080,Low,Disabled,Good",
        "RTX 3070,  ,60,100,Off,None,1920x1080,Low,Disabled,Good",
        "RTX 3070,SomeCPU,60,100,Off,None,1920x1080,Low,Disabled,Good",
    ]
    records, skipped, _ = build_records_with_report(lines, 1)
    assert [(r.gpu, r.cpu) for r in records] == [("RTX 3070", "SomeCPU")]
    assert skipped.missing_gpu_or_cpu == 2

def test_build_records_skips_short_and_blank_rows():
    lines = ["instructions", "Verdict,Score,GPU,CPU Model", "   ", "Good,10", "Good,10,RTX 3060,Ryzen"]
    records, skipped, _ = build_records_with_report(lines, 1)
    assert len(records) == 1
    assert skipped.blank_lines == 1
    assert skipped.short_rows == 1

def test_build_records_defaults_for_missing_columns():
    lines = ["instructions", "CPU Model,GPU", "Ryzen 5 5600X,GeForce RTX 2080"]
    rec = build_records(lines, 1)[0]
    assert rec.gpu == "RTX 2080"
    assert rec.cpu == "Ryzen 5 5600X"
    assert rec.resolution == ""
    assert rec.graphics_settings == ""
    assert rec.ray_tracing == "Off"
    assert rec.frame_generation == "Disabled"
    assert rec.upscaling == "None"
    assert rec.avg_fps == 0
    assert rec.score == 0
    assert rec.verdict == ""

def test_build_records_defaults_for_empty_cells():
    lines = ["instructions", HEADER, "RTX 3080,Intel Core i7-12700K,abc,,,,,,,"]
    rec = build_records(lines, 1)[0]
    assert rec.avg_fps == 0
    assert rec.score == 0
    assert rec.ray_tracing == "Off"
    assert rec.upscaling == "None"
    assert rec.frame_generation == "Disabled"
    assert rec.verdict == ""

def test_build_records_header_fields_are_trimmed():
    lines = ["instructions", ' GPU , "CPU Model" ,Verdict\r', "RTX 3060,Ryzen 5 3600,ok."]
    rec = build_records(lines, 1)[0]
    assert rec.gpu == "RTX 3060"
    assert rec.verdict == "Ok"

def test_build_records_missing_required_columns():
    with pytest.raises(MissingRequiredColumns) as exc:
        build_records(["instructions", "GPU,Resolution"], 1)
    assert exc.value.missing == ["CPU Model"]

def test_build_records_header_past_end_is_missing_columns():
    with pytest.raises(MissingRequiredColumns):
        build_records(["instructions", "x"], 7)


# --- end to end ---

def test_ingest_text_end_to_end():
    text = "\n".join(["Fill in one row per run", HEADER, ROW_4090])
    result = ingest_text(text, "sheet")

    assert result.source == "sheet"
    assert len(result.records) == 1
    rec = result.records[0]
    assert rec.gpu == "RTX 4090"
    assert rec.cpu == "Core i9-13900K"
    assert rec.avg_fps == 120.5
    assert rec.verdict == "Excellent"

    perf = result.views.gpu_performance
    assert len(perf) == 1
    assert (perf[0].name, perf[0].avg_fps, perf[0].sample_count) == ("RTX 4090", 120.5, 1)

    buckets = {b.range_label: b.count for b in result.views.fps_ranges}
    assert buckets == {"0-30": 0, "31-60": 0, "61-90": 0, "91-120": 1, "121-144": 0, "145+": 0}

def test_ingest_text_header_fallback_row_seven():
    lines = ["instructions"] + ["junk"] * 6 + ["GPU,CPU Model", "RTX 3060,Ryzen 5 3600"]
    result = ingest_text("\n".join(lines), "sheet")
    assert result.report.header_index == 7
    assert result.report.header_fallback is True
    assert result.records[0].gpu == "RTX 3060"

@pytest.mark.parametrize("text", ["", "   \n\t", "only one line"])
def test_ingest_text_empty_input(text):
    with pytest.raises(EmptyInput):
        ingest_text(text, "sheet")

def test_ingest_text_no_valid_rows():
    with pytest.raises(NoValidRows):
        ingest_text("\n".join(["instructions", HEADER, ",,", "   "]), "sheet")

def test_ingest_bytes_strips_bom_and_crlf():
    text = "\r\n".join(["instructions", HEADER, ROW_4090])
    result = ingest_bytes(b"\xef\xbb\xbf" + text.encode("utf-8"), "sheet.csv")
    assert result.records[0].verdict == "Excellent"
    assert result.report.decoding["newlines_changed"] is True

def test_decode_text_normalizes_newlines():
    text, report = decode_text(b"a,b\r\nc,d\re,f\n")
    assert text == "a,b\nc,d\ne,f\n"
    assert report["newlines_changed"] is True
