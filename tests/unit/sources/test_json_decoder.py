import pytest

from uvdash.sources.decoders import JsonDecoder


def test_json_decoder_yields_array_items():
    chunks = [b'[{"a": 1},', b' {"a": 2}]']
    assert list(JsonDecoder().decode(chunks)) == [{"a": 1}, {"a": 2}]


def test_json_decoder_handles_multibyte_split_across_chunks():
    payload = '[{"CITY": "São Paulo"}]'.encode("utf-8")
    cut = payload.index(b"\xa3")
    rows = list(JsonDecoder().decode([payload[:cut], payload[cut:]]))
    assert rows == [{"CITY": "São Paulo"}]


def test_json_decoder_object_yields_single_row():
    assert list(JsonDecoder().decode([b'{"status": "OK"}'])) == [{"status": "OK"}]


def test_json_decoder_require_array_rejects_error_objects():
    decoder = JsonDecoder(require_array=True)
    with pytest.raises(ValueError, match="expected a json array"):
        list(decoder.decode([b'{"error": "bad zip"}']))


def test_json_decoder_empty_document():
    with pytest.raises(ValueError, match="empty"):
        JsonDecoder().load([b"  "])
