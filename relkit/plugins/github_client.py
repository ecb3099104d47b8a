"""Minimal GitHub REST client for releases.

Every method returns ``Result[..., HttpError]`` so callers can feed failures
to the retry policy. Works against github.com and GitHub Enterprise hosts.
"""

from __future__ import annotations

import mimetypes
import re
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import quote

from relkit.core.result import Err, Ok, Result
from relkit.core.structured import as_str_dict, get_int, get_str
from relkit.platform.http import HttpClient, HttpError

__all__ = [
    "DEFAULT_HOST",
    "DraftRelease",
    "GitHubClient",
    "ReleaseMetadata",
    "api_base_for",
]

DEFAULT_HOST = "github.com"

_URI_TEMPLATE_RE = re.compile(r"\{[^}]*\}$")


def api_base_for(host: str) -> str:
    """``https://api.github.com`` for github.com, ``https://<host>/api/v3`` otherwise."""
    if host == DEFAULT_HOST:
        return "https://api.github.com"
    return f"https://{host}/api/v3"


@dataclass(frozen=True, slots=True)
class ReleaseMetadata:
    tag_name: str
    name: str
    body: str
    prerelease: bool


@dataclass(frozen=True, slots=True)
class DraftRelease:
    id: int
    upload_url: str
    html_url: str | None = None


class GitHubClient:
    def __init__(self, http: HttpClient, *, api_base: str, token: str) -> None:
        self.http = http
        self.api_base = api_base.rstrip("/")
        self._headers = {
            "Authorization": f"token {token}",
            "Accept": "application/vnd.github+json",
        }

    def _url(self, path: str) -> str:
        return f"{self.api_base}/{path.lstrip('/')}"

    def _invalid(self, url: str, what: str) -> Err[HttpError]:
        return Err(HttpError(url=url, status=0, message=f"unexpected payload: {what}", retryable=False))

    def authenticate(self) -> Result[str, HttpError]:
        """Return the login of the token's owner."""
        url = self._url("user")
        result = self.http.request_json("GET", url, headers=self._headers)
        if isinstance(result, Err):
            return result
        data = as_str_dict(result.value)
        login = get_str(data, "login") if data is not None else None
        if login is None:
            return self._invalid(url, "user.login")
        return Ok(login)

    def check_collaborator(self, owner: str, repo: str, username: str) -> Result[None, HttpError]:
        """Ok when ``username`` is a collaborator (the API answers 204, else 404)."""
        url = self._url(f"repos/{owner}/{repo}/collaborators/{quote(username)}")
        result = self.http.request_json("GET", url, headers=self._headers)
        if isinstance(result, Err):
            return result
        return Ok(None)

    def create_draft_release(
        self, owner: str, repo: str, metadata: ReleaseMetadata
    ) -> Result[DraftRelease, HttpError]:
        url = self._url(f"repos/{owner}/{repo}/releases")
        body = {
            "tag_name": metadata.tag_name,
            "name": metadata.name,
            "body": metadata.body,
            "prerelease": metadata.prerelease,
            "draft": True,
        }
        result = self.http.request_json("POST", url, headers=self._headers, body=body)
        if isinstance(result, Err):
            return result

        data = as_str_dict(result.value)
        if data is None:
            return self._invalid(url, "release")
        release_id = get_int(data, "id")
        upload_url = get_str(data, "upload_url")
        if release_id is None or upload_url is None:
            return self._invalid(url, "release.id/upload_url")
        return Ok(
            DraftRelease(
                id=release_id,
                # "https://uploads.github.com/.../assets{?name,label}"
                upload_url=_URI_TEMPLATE_RE.sub("", upload_url),
                html_url=get_str(data, "html_url"),
            )
        )

    def publish_release(self, owner: str, repo: str, release_id: int) -> Result[str | None, HttpError]:
        """Flip the draft flag; returns the release page URL when the API reports it."""
        url = self._url(f"repos/{owner}/{repo}/releases/{release_id}")
        result = self.http.request_json("PATCH", url, headers=self._headers, body={"draft": False})
        if isinstance(result, Err):
            return result
        data = as_str_dict(result.value)
        return Ok(get_str(data, "html_url") if data is not None else None)

    def upload_asset(self, release: DraftRelease, path: Path) -> Result[str | None, HttpError]:
        """Upload one file; returns its download URL when the API reports it."""
        url = f"{release.upload_url}?name={quote(path.name)}"
        content_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
        result = self.http.upload(url, path, headers=self._headers, content_type=content_type)
        if isinstance(result, Err):
            return result
        data = as_str_dict(result.value)
        return Ok(get_str(data, "browser_download_url") if data is not None else None)
