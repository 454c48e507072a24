from pathlib import Path

import orjson
import pytest

from mojirec.frequency import (
    DIGIT_FREQUENCY,
    LATIN_FREQUENCY,
    FrequencyModel,
    default_frequency_model,
    load_frequency_model,
)


def test_default_model_covers_cjk_latin_digits_and_punctuation():
    model = default_frequency_model()
    assert model.get("的") > model.get("中") > 0
    assert model.get("e") == LATIN_FREQUENCY["e"]
    assert model.get("7") == DIGIT_FREQUENCY["7"]
    assert model.get("。") > 0
    assert "中" in model
    assert model.get("@") == 0


def test_chinese_view_excludes_latin_and_digits():
    model = default_frequency_model()
    assert model.chinese_frequency("e") == 0
    assert model.chinese_frequency("1") == 0
    assert model.chinese_frequency("中") == model.get("中")


def test_from_tables_drops_multichar_and_non_cjk_keys():
    model = FrequencyModel.from_tables({"中": 5, "中文": 9, "x": 500, "é": 3})
    assert model.chinese_frequency("中") == 5
    assert model.chinese_frequency("中文") == 0
    assert model.chinese_frequency("x") == 0
    assert model.get("x") == LATIN_FREQUENCY["x"]
    assert model.get("é") == 0


def test_model_is_read_only():
    model = FrequencyModel.from_tables({"中": 5})
    with pytest.raises(TypeError):
        model.combined["中"] = 1  # type: ignore[index]


def test_load_frequency_model_from_json(tmp_path: Path) -> None:
    path = tmp_path / "freq.json"
    path.write_bytes(orjson.dumps({"中": 10, "文": 4}))
    model = load_frequency_model(path)
    assert model.chinese_frequency("文") == 4
    assert len(model) == len(model.combined)


def test_load_frequency_model_rejects_non_object(tmp_path: Path) -> None:
    path = tmp_path / "freq.json"
    path.write_bytes(orjson.dumps(["中", "文"]))
    with pytest.raises(ValueError):
        load_frequency_model(path)
