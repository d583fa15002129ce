import io
import json
import logging

from search_replace.pipeline import run_pipeline
from search_replace.replacements import ReplacementSet


def _events(records):
    events = []
    for record in records:
        try:
            events.append(json.loads(record.getMessage()))
        except json.JSONDecodeError:
            continue
    return events


def test_pipeline_complete_json_log(caplog):
    replacements = ReplacementSet.from_pairs([(b"http://a.com", b"https://a.com")])
    data = b"http://a.com\n" + rb"s:99:\"http://a.com\";" + b"\n"

    with caplog.at_level(logging.INFO):
        run_pipeline(io.BytesIO(data), io.BytesIO(), replacements)

    events = _events(caplog.records)
    complete = [e for e in events if e.get("event") == "pipeline_complete"]
    assert len(complete) == 1
    assert complete[0]["lines"] == 2
    assert complete[0]["malformed_lines"] == 1

    malformed = [e for e in events if e.get("event") == "malformed_token"]
    assert len(malformed) == 1


def test_read_error_json_log(caplog):
    class FailingSource(io.BytesIO):
        def readline(self, *args):
            raise OSError("broken pipe")

    replacements = ReplacementSet.from_pairs([(b"http://a.com", b"https://a.com")])
    with caplog.at_level(logging.ERROR):
        report = run_pipeline(FailingSource(), io.BytesIO(), replacements)

    assert report.read_error == "broken pipe"
    errors = [e for e in _events(caplog.records) if e.get("event") == "read_error"]
    assert errors == [{"event": "read_error", "error": "broken pipe"}]
