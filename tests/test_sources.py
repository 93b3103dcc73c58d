"""Tests for dendro_overlap/data/sources.py - local and remote artifact reads."""
from __future__ import annotations

import httpx
import pytest

from dendro_overlap.data import sources
from dendro_overlap.data.sources import is_remote, read_artifact
from dendro_overlap.errors import LoadError


@pytest.fixture(autouse=True)
def no_sleep(monkeypatch):
    delays = []
    monkeypatch.setattr(sources.time, "sleep", delays.append)
    return delays


def _client(handler) -> httpx.Client:
    return httpx.Client(transport=httpx.MockTransport(handler))


@pytest.mark.unit
def test_is_remote():
    assert is_remote("https://example.org/a.csv")
    assert is_remote("http://localhost/a.csv")
    assert not is_remote("data/a.csv")


@pytest.mark.integration
class TestLocal:
    def test_reads_utf8(self, tmp_path):
        path = tmp_path / "scores.csv"
        path.write_text(",Economía\n", encoding="utf-8")
        assert read_artifact(str(path)) == ",Economía\n"

    def test_missing_file(self, tmp_path):
        missing = tmp_path / "nope.csv"
        with pytest.raises(LoadError) as excinfo:
            read_artifact(str(missing))
        assert excinfo.value.source == str(missing)

    def test_invalid_encoding(self, tmp_path):
        path = tmp_path / "latin.csv"
        path.write_bytes(b"\xff\xfe\xfa")
        with pytest.raises(LoadError):
            read_artifact(str(path))


@pytest.mark.unit
class TestRemote:
    URL = "https://example.org/scores.csv"

    def test_success(self):
        client = _client(lambda request: httpx.Response(200, text="a,b\n"))
        assert read_artifact(self.URL, client=client) == "a,b\n"

    def test_retries_server_errors(self, no_sleep):
        responses = iter([httpx.Response(503), httpx.Response(502), httpx.Response(200, text="ok")])
        client = _client(lambda request: next(responses))

        assert read_artifact(self.URL, client=client) == "ok"
        assert no_sleep == [0.5, 1.0]

    def test_client_error_is_not_retried(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(404)

        with pytest.raises(LoadError, match="404"):
            read_artifact(self.URL, client=_client(handler))
        assert len(calls) == 1

    def test_transport_errors_exhaust_retries(self, no_sleep):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(LoadError) as excinfo:
            read_artifact(self.URL, client=_client(handler))
        assert excinfo.value.source == self.URL
        assert len(no_sleep) == 2
