from __future__ import annotations

import json
from pathlib import Path

from funkrunner.funk_config import FunkConfig, FunkFunction, load_funk_config


def test_load_json_manifest(tmp_path: Path) -> None:
    path = tmp_path / "funks.json"
    path.write_text(
        json.dumps({"funks": [{"name": "hello", "source": "main.go", "type": "http", "return-type": "string"}]}),
        encoding="utf-8",
    )
    cfg = load_funk_config(path)
    assert cfg.funks == [FunkFunction("hello", "main.go", "http", "string")]
    assert cfg.to_dict()["funks"][0]["return-type"] == "string"


def test_missing_fields_default_to_empty() -> None:
    cfg = FunkConfig.from_dict({"funks": [{"name": "x"}]})
    assert cfg.funks[0].return_type == ""
    assert FunkConfig.from_dict({}).funks == []
