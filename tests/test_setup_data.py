import json

import pytest
import requests

import setup_data
from element_games.errors import CatalogError


class FakeResponse:
    def __init__(self, content: bytes, status: int = 200):
        self.content = content
        self.status = status

    def raise_for_status(self):
        if self.status >= 400:
            raise requests.HTTPError(f"{self.status} error")


PAYLOAD = {
    "elements": [
        {"name": "Hydrogen", "symbol": "H", "number": 1, "period": 1, "group": 1,
         "category": "diatomic nonmetal", "phase": "Gas", "atomic_mass": 1.008},
        {"name": "Helium", "symbol": "He", "number": 2, "period": 1, "group": 18,
         "category": "noble gas", "phase": "Gas", "atomic_mass": 4.0026},
    ]
}


class TestSetupData:

    def test_main_when_download_ok_then_file_saved_and_validated(self, tmp_path, monkeypatch, capsys):
        body = json.dumps(PAYLOAD).encode("utf-8")
        monkeypatch.setattr(setup_data.requests, "get", lambda url, timeout: FakeResponse(body))
        out = tmp_path / "table.json"
        setup_data.main([str(out)])
        assert out.read_bytes() == body
        assert "2 elements" in capsys.readouterr().out

    def test_download_when_http_error_then_raises(self, tmp_path, monkeypatch):
        monkeypatch.setattr(setup_data.requests, "get", lambda url, timeout: FakeResponse(b"", status=404))
        with pytest.raises(requests.HTTPError):
            setup_data.download(str(tmp_path / "table.json"))

    def test_main_when_payload_not_a_table_then_catalog_error(self, tmp_path, monkeypatch):
        monkeypatch.setattr(setup_data.requests, "get", lambda url, timeout: FakeResponse(b"[]"))
        with pytest.raises(CatalogError):
            setup_data.main([str(tmp_path / "table.json")])
