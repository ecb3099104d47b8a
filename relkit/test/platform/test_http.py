"""Tests for relkit.platform.http module."""

from __future__ import annotations

from pathlib import Path

from relkit.core.result import Err, Ok
from relkit.platform.http import HttpClient, HttpError, MockHttpClient, RealHttpClient, _error_message

API = "https://api.github.com"


class TestHttpError:
    def test_str_with_status(self) -> None:
        error = HttpError(url=f"{API}/user", status=401, message="Bad credentials")
        assert str(error) == f"HTTP 401: Bad credentials ({API}/user)"

    def test_str_network_error(self) -> None:
        error = HttpError(url=f"{API}/user", status=0, message="Connection refused")
        assert str(error) == f"Connection refused ({API}/user)"


class TestMockHttpClient:
    def test_satisfies_protocol(self) -> None:
        assert isinstance(MockHttpClient(), HttpClient)
        assert isinstance(RealHttpClient(), HttpClient)

    def test_configured_response(self) -> None:
        client = MockHttpClient()
        client.set("GET", f"{API}/user", {"login": "john"})
        assert client.request_json("GET", f"{API}/user") == Ok({"login": "john"})

    def test_unknown_route_is_404(self) -> None:
        result = MockHttpClient().request_json("GET", f"{API}/nope")
        assert isinstance(result, Err)
        assert result.error.status == 404

    def test_responses_consumed_in_order_last_repeats(self) -> None:
        client = MockHttpClient()
        url = f"{API}/repos/user/repo/releases"
        client.set("POST", url, HttpError(url, 500, "Request failed"), {"id": 1})
        first = client.request_json("POST", url, body={"draft": True})
        second = client.request_json("POST", url)
        third = client.request_json("POST", url)
        assert isinstance(first, Err)
        assert second == Ok({"id": 1})
        assert third == Ok({"id": 1})
        assert client.count("POST", url) == 3
        assert client.calls[0].body == {"draft": True}

    def test_upload_records_file_name(self, tmp_path: Path) -> None:
        asset = tmp_path / "file.zip"
        asset.write_bytes(b"zip")
        client = MockHttpClient()
        url = "https://uploads.github.com/repos/user/repo/releases/1/assets?name=file.zip"
        client.set("POST", url, {"browser_download_url": "https://example.org/file.zip"})
        result = client.upload(url, asset)
        assert isinstance(result, Ok)
        assert client.calls[-1].body == "file.zip"


class TestErrorMessage:
    def test_json_message(self) -> None:
        assert _error_message(b'{"message": "Not Found"}', "fallback") == "Not Found"

    def test_not_json(self) -> None:
        assert _error_message(b"<html>", "Bad Gateway") == "Bad Gateway"

    def test_json_without_message(self) -> None:
        assert _error_message(b"[]", "Forbidden") == "Forbidden"


def test_upload_missing_file(tmp_path: Path) -> None:
    result = RealHttpClient().upload("https://example.invalid/upload", tmp_path / "missing.zip")
    assert isinstance(result, Err)
    assert result.error.status == 0
    assert "cannot read" in result.error.message
    assert result.error.retryable is False
