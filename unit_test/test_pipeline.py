import json

import pytest

from shipment_query.config import AZURE_ENV_VARS, LOCAL_SOURCE_ENV_VAR, OPTIONAL_ENV_VARS
from shipment_query.pipeline import (ShipmentQueryPipeline, build_query, main,
                                     parse_args)


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    for var in [LOCAL_SOURCE_ENV_VAR] + AZURE_ENV_VARS + OPTIONAL_ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    return monkeypatch


@pytest.fixture
def records_file(tmp_path):
    path = tmp_path / "shipments.jsonl"
    rows = [
        {"shipmentID": "IC-1", "status": "delivered", "shipTo": {"city": "Barrie"}},
        {"shipmentID": "IC-2", "status": "in transit", "shipTo": {"city": "Toronto"}},
        {"shipmentID": "IC-3", "status": "draft", "shipTo": {"city": "Barrie"}},
    ]
    path.write_text("\n".join(json.dumps(r) for r in rows) + "\n", encoding="utf-8")
    return path


def test_missing_source_raises(clean_env):
    with pytest.raises(EnvironmentError):
        ShipmentQueryPipeline().load_configuration()


def test_run_against_a_local_file(clean_env, records_file, tmp_path):
    clean_env.setenv(LOCAL_SOURCE_ENV_VAR, str(records_file))
    out_dir = tmp_path / "export"

    pipeline = ShipmentQueryPipeline()
    result = pipeline.run(build_query(parse_args(["barrie"])), output_dir=str(out_dir))

    assert [r["shipmentID"] for r in result.all_filtered] == ["IC-1"]
    exported = list(out_dir.glob("shipments_*_1.jsonl"))
    assert len(exported) == 1


def test_semantic_flag(clean_env, records_file):
    clean_env.setenv(LOCAL_SOURCE_ENV_VAR, str(records_file))
    query = build_query(parse_args(["shipments in transit", "--semantic"]))
    result = ShipmentQueryPipeline().run(query, use_semantic=True)
    assert [r["shipmentID"] for r in result.all_filtered] == ["IC-2"]


def test_build_query_flags_override_the_query_file(tmp_path):
    query_file = tmp_path / "query.json"
    query_file.write_text(json.dumps({"text": "barrie", "tabFilter": "delivered", "pageSize": 5}), encoding="utf-8")
    args = parse_args(["--query-file", str(query_file), "--sort", "eta", "--direction", "asc", "--page-size", "-1"])
    query = build_query(args)
    assert query.text == "barrie"
    assert query.tab_filter == "delivered"
    assert query.sort_key == "eta"
    assert query.sort_direction == "asc"
    assert query.page_size == -1


def test_main_exits_non_zero_without_configuration(clean_env):
    with pytest.raises(SystemExit) as exc:
        main([])
    assert exc.value.code == 1


def test_main_prints_the_page(clean_env, records_file, capsys):
    clean_env.setenv(LOCAL_SOURCE_ENV_VAR, str(records_file))
    main(["--tab", "all", "--sort", "shipmentID", "--direction", "asc"])
    last_line = capsys.readouterr().out.strip().splitlines()[-1]
    assert json.loads(last_line) == ["IC-1", "IC-2"]
