from pathlib import Path

import pytest

from iGallery.errors import StoreError
from iGallery.utils.jsonio import read_json, write_json


def test_write_then_read(tmp_path: Path) -> None:
    target = tmp_path / "nested" / "data.json"
    write_json(target, {"b": 1, "a": "é"})
    assert read_json(target) == {"a": "é", "b": 1}
    assert not target.with_suffix(".json.tmp").exists()


def test_read_errors(tmp_path: Path) -> None:
    with pytest.raises(StoreError, match="not found"):
        read_json(tmp_path / "missing.json")

    bad = tmp_path / "bad.json"
    bad.write_text("[1, 2]", encoding="utf-8")
    with pytest.raises(StoreError, match="JSON object"):
        read_json(bad)
