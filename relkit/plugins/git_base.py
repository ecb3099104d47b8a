"""Shared behavior for plugins backed by the local git repository."""

from __future__ import annotations

from relkit.core.result import Ok
from relkit.core.version import parse_version
from relkit.git.repository import RepoInfo, Repository, parse_remote
from relkit.release.plugin import Plugin, Runtime


class GitBasePlugin[C](Plugin[C]):
    """Reads the latest tag, remote and changelog in ``init``; names the tag in ``bump``."""

    def __init__(self, config: C, runtime: Runtime) -> None:
        super().__init__(config, runtime)
        self.repo = Repository(self.shell)

    def configured_remote_url(self) -> str | None:
        return None

    def tag_name_template(self) -> str | None:
        return None

    def init_git(self) -> None:
        latest_tag = self.repo.latest_tag()
        tag = latest_tag.value if isinstance(latest_tag, Ok) else None
        if tag is None:
            self.console.debug("No git tag found; assuming first release.")

        remote_url = self.configured_remote_url()
        if remote_url is None:
            fetched = self.repo.remote_url()
            remote_url = fetched.value if isinstance(fetched, Ok) else None

        info = parse_remote(remote_url) if remote_url else None
        changelog = self.repo.changelog(tag)

        self.set_context(
            {
                "latest_tag": tag or "",
                "remote_url": remote_url or "",
                "changelog": changelog.value if isinstance(changelog, Ok) else "",
            }
        )
        if info is not None:
            self.set_context(
                {
                    "repo": {
                        "host": info.host,
                        "owner": info.owner,
                        "project": info.project,
                        "repository": info.repository,
                    }
                }
            )

    def bump_git(self, version: str) -> str:
        template = self.tag_name_template()
        if template is None:
            latest = self.get_context("latest_tag")
            template = "v${version}" if isinstance(latest, str) and latest.startswith("v") else "${version}"
        self.set_context({"version": version})
        tag_name = self.format(template)
        self.set_context({"tag_name": tag_name})
        return tag_name

    def get_latest_version(self) -> str | None:
        tag = self.get_context("latest_tag")
        version = parse_version(tag) if isinstance(tag, str) else None
        return str(version) if version is not None else None

    def repo_info(self) -> RepoInfo | None:
        host = self.get_context("repo.host")
        owner = self.get_context("repo.owner")
        project = self.get_context("repo.project")
        if isinstance(host, str) and isinstance(owner, str) and isinstance(project, str):
            return RepoInfo(host=host, owner=owner, project=project)
        return None

    def tag_name(self) -> str | None:
        value = self.get_context("tag_name")
        return value if isinstance(value, str) and value else None
