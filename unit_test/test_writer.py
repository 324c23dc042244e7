import json

import pandas as pd
import pytest

from shipment_query.writer import ExportWriterConfig, JsonlExportWriter


def _read_lines(path):
    with open(path, "r", encoding="utf-8") as f:
        return [json.loads(line) for line in f]


def test_writes_one_document_per_record(tmp_path, make_shipment):
    records = [
        make_shipment("IC-1", status="received", createdAt=pd.Timestamp("2025-03-14 08:00")),
        make_shipment("IC-2", status="Weird Status"),
    ]
    writer = JsonlExportWriter(ExportWriterConfig(output_dir=str(tmp_path)))
    path = writer.write(records, tag="test")

    assert path.name == "shipments_test_1.jsonl"
    docs = _read_lines(path)
    assert [d["document_id"] for d in docs] == ["IC-1", "IC-2"]
    assert docs[0]["status"] == "delivered"
    assert docs[1]["status"] == "weird_status"
    assert docs[0]["shipment"]["createdAt"] == "2025-03-14T08:00:00"
    assert writer.generated_files == [path]


def test_counter_continues_existing_files(tmp_path):
    (tmp_path / "shipments_test_4.jsonl").write_text("", encoding="utf-8")
    (tmp_path / "shipments_other_9.jsonl").write_text("", encoding="utf-8")
    writer = JsonlExportWriter(ExportWriterConfig(output_dir=str(tmp_path)))
    assert writer.write([], tag="test").name == "shipments_test_5.jsonl"


def test_records_without_id(tmp_path):
    writer = JsonlExportWriter(ExportWriterConfig(output_dir=str(tmp_path)))
    docs = _read_lines(writer.write([{"status": "pending"}], tag="t"))
    assert docs[0]["document_id"] == "record_1"

    strict = JsonlExportWriter(ExportWriterConfig(output_dir=str(tmp_path), strict=True))
    with pytest.raises(ValueError):
        strict.write([{"status": "pending"}], tag="t")


def test_rejects_non_mapping_records(tmp_path):
    writer = JsonlExportWriter(ExportWriterConfig(output_dir=str(tmp_path)))
    with pytest.raises(TypeError):
        writer.write(["IC-1"], tag="t")
