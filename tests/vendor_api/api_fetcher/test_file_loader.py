import json

import pytest

from vendor_api.api_fetcher.errors import ConfigError
from vendor_api.api_fetcher.file_loader import JsonFileLoader


@pytest.mark.unit
def test_load_relative_to_base_dir(tmp_path):
    (tmp_path / "a.json").write_text(json.dumps({"x": 1}))
    loader = JsonFileLoader(base_dir=tmp_path)
    assert loader.load("a.json") == {"x": 1}


@pytest.mark.unit
def test_unchanged_file_served_from_cache(tmp_path):
    (tmp_path / "a.json").write_text(json.dumps({"x": 1}))
    loader = JsonFileLoader(base_dir=tmp_path)
    assert loader.load("a.json") is loader.load("a.json")


@pytest.mark.unit
def test_changed_file_is_reparsed(tmp_path):
    path = tmp_path / "a.json"
    path.write_text(json.dumps({"x": 1}))
    loader = JsonFileLoader(base_dir=tmp_path)
    loader.load(path)

    path.write_text(json.dumps({"x": 2}))
    assert loader.load(path) == {"x": 2}


@pytest.mark.unit
def test_invalidate_and_clear(tmp_path):
    (tmp_path / "a.json").write_text(json.dumps({"x": 1}))
    loader = JsonFileLoader(base_dir=tmp_path)
    first = loader.load("a.json")

    loader.invalidate("a.json")
    second = loader.load("a.json")
    assert first is not second

    loader.clear_cache()
    assert loader.load("a.json") is not second


@pytest.mark.unit
def test_missing_file_raises_config_error(tmp_path):
    loader = JsonFileLoader(base_dir=tmp_path)
    with pytest.raises(ConfigError) as e:
        loader.load("missing.json")
    assert "missing.json" in str(e.value)
