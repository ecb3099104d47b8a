from __future__ import annotations

import glob
from pathlib import Path

from relkit.core.config import GitHubConfig, ReleaseConfig
from relkit.core.result import Err, Ok, Result
from relkit.core.version import parse_version
from relkit.platform.environment import trusted_actor
from relkit.platform.http import HttpClient, RealHttpClient
from relkit.plugins.git_base import GitBasePlugin
from relkit.plugins.github_client import (
    DEFAULT_HOST,
    DraftRelease,
    GitHubClient,
    ReleaseMetadata,
    api_base_for,
)
from relkit.release.errors import (
    AuthError,
    AuthorizationError,
    ConfigError,
    PreconditionFailed,
    ReleaseActionFailed,
    ReleaseError,
)
from relkit.release.plugin import Runtime
from relkit.release.retry import RetryPolicy, call_with_retry
from relkit.release.steps import Prompt

_PERMISSION_STATUSES = frozenset({401, 403, 404})


class GitHubPlugin(GitBasePlugin[GitHubConfig]):
    """Create a GitHub release: draft, upload assets, publish."""

    namespace = "github"
    prompts = {
        "release": Prompt("release", "Create a release on GitHub (${release_name})?"),
    }

    def __init__(
        self,
        config: GitHubConfig,
        runtime: Runtime,
        *,
        client: GitHubClient | None = None,
    ) -> None:
        super().__init__(config, runtime)
        self._client = client

    @classmethod
    def is_enabled(cls, config: ReleaseConfig, cwd: Path) -> bool:
        return config.github.release

    @classmethod
    def select_config(cls, config: ReleaseConfig) -> GitHubConfig:
        return config.github

    def configured_remote_url(self) -> str | None:
        return self.config.remote_url

    # Collaborators

    @property
    def token(self) -> str | None:
        value = self.env.get(self.config.token_ref, "").strip()
        return value or None

    @property
    def host(self) -> str:
        if self.config.host:
            return self.config.host
        repo = self.repo_info()
        return repo.host if repo is not None else DEFAULT_HOST

    @property
    def client(self) -> GitHubClient:
        if self._client is None:
            http: HttpClient
            if self.runtime.http_factory is not None:
                http = self.runtime.http_factory(self.config.proxy, self.config.timeout)
            else:
                http = RealHttpClient(timeout=self.config.timeout, proxy=self.config.proxy)
            self._client = GitHubClient(http, api_base=api_base_for(self.host), token=self.token or "")
        return self._client

    @property
    def retry_policy(self) -> RetryPolicy:
        return RetryPolicy(
            max_attempts=self.config.retry_attempts,
            min_timeout=self.config.retry_min_timeout,
        )

    def _on_retry(self, attempt: int, error: object) -> None:
        self.console.debug(f"GitHub request failed (attempt {attempt}): {error}")

    # Lifecycle

    def init(self) -> Result[None, ReleaseError]:
        token_ref = self.config.token_ref
        if self.token is None:
            return Err(
                ConfigError(
                    variable=token_ref,
                    reason=f'Environment variable "{token_ref}" is required for GitHub releases.',
                )
            )

        self.init_git()
        repo = self.repo_info()
        if repo is None:
            return Err(
                PreconditionFailed(
                    target="github",
                    reason="Could not determine the GitHub repository from the git remote.",
                )
            )

        if self.config.skip_checks:
            return Ok(None)

        actor = trusted_actor(self.env)
        if actor is not None:
            self.set_context({"username": actor})
            return Ok(None)

        if self.options.dry_run:
            return Ok(None)

        authenticated = call_with_retry(self.client.authenticate, policy=self.retry_policy, on_retry=self._on_retry)
        if isinstance(authenticated, Err):
            if authenticated.error.status in (401, 403):
                return Err(
                    AuthError(
                        target="github",
                        detail=(
                            "Could not authenticate with GitHub using environment variable "
                            f'"{token_ref}".'
                        ),
                    )
                )
            return authenticated

        username = authenticated.value
        self.set_context({"username": username})

        collaborator = call_with_retry(
            lambda: self.client.check_collaborator(repo.owner, repo.project, username),
            policy=self.retry_policy,
            on_retry=self._on_retry,
        )
        if isinstance(collaborator, Err):
            if collaborator.error.status in _PERMISSION_STATUSES:
                return Err(AuthorizationError(user=username, repository=repo.repository))
            return collaborator
        return Ok(None)

    def bump(self, version: str) -> Result[None, ReleaseError]:
        self.bump_git(version)
        parsed = parse_version(version)
        self.set_context({"prerelease": parsed.is_pre_release if parsed is not None else False})
        self.set_context({"release_name": self.format(self.config.release_name)})
        return Ok(None)

    def release(self) -> Result[None, ReleaseError]:
        result = self.step(task=self._release, label="GitHub release", prompt="release")
        if isinstance(result, Err):
            return result
        return Ok(None)

    def get_release_url(self) -> str | None:
        html_url = self.get_context("release_url")
        if isinstance(html_url, str) and html_url:
            return html_url
        repo = self.repo_info()
        tag_name = self.tag_name()
        if repo is None or tag_name is None:
            return None
        return f"https://{self.host}/{repo.repository}/releases/tag/{tag_name}"

    # Release steps

    def _release(self) -> Result[None, ReleaseError]:
        draft = self._draft_release()
        if isinstance(draft, Err):
            return draft

        uploaded = self._upload_assets(draft.value)
        if isinstance(uploaded, Err):
            return uploaded

        return self._publish_release(draft.value)

    def _release_notes(self) -> Result[str, ReleaseError]:
        command = self.config.release_notes
        if command is None:
            return Ok(str(self.get_context("changelog") or ""))

        result = self.shell.exec(command, write=False, template_vars=self.template_vars())
        if isinstance(result, Err):
            return Err(ReleaseActionFailed(action="release notes", detail=result.error.output))
        return result

    def _draft_release(self) -> Result[DraftRelease | None, ReleaseError]:
        repo = self.repo_info()
        tag_name = self.tag_name()
        if repo is None or tag_name is None:
            return Err(ReleaseActionFailed(action="GitHub release", detail="repository or tag unknown"))

        notes = self._release_notes()
        if isinstance(notes, Err):
            return notes

        name = str(self.get_context("release_name") or "")
        self.shell.log_exec(f'github releases#draft "{name}" ({tag_name})', executed=not self.options.dry_run)
        if self.options.dry_run:
            return Ok(None)

        metadata = ReleaseMetadata(
            tag_name=tag_name,
            name=name,
            body=notes.value,
            prerelease=bool(self.get_context("prerelease")),
        )
        created = call_with_retry(
            lambda: self.client.create_draft_release(repo.owner, repo.project, metadata),
            policy=self.retry_policy,
            on_retry=self._on_retry,
        )
        if isinstance(created, Err):
            return created

        self.set_context({"release_id": created.value.id})
        return created

    def _asset_paths(self) -> list[Path]:
        paths: list[Path] = []
        for pattern in self.config.assets:
            matches = sorted(glob.glob(pattern, root_dir=self.runtime.cwd, recursive=True))
            if not matches:
                self.console.warning(f"No files match asset pattern: {pattern}")
            paths.extend(self.runtime.cwd / match for match in matches)
        return [p for p in paths if p.is_file()]

    def _upload_assets(self, draft: DraftRelease | None) -> Result[None, ReleaseError]:
        if not self.config.assets:
            return Ok(None)

        self.shell.log_exec("github releases#upload_assets", executed=not self.options.dry_run)
        if draft is None:
            return Ok(None)

        for path in self._asset_paths():
            uploaded = call_with_retry(
                lambda p=path: self.client.upload_asset(draft, p),
                policy=self.retry_policy,
                on_retry=self._on_retry,
            )
            if isinstance(uploaded, Err):
                return uploaded
            self.console.debug(f"Uploaded {path.name}")
        return Ok(None)

    def _publish_release(self, draft: DraftRelease | None) -> Result[None, ReleaseError]:
        repo = self.repo_info()
        tag_name = self.tag_name()
        self.shell.log_exec(f"github releases#publish ({tag_name})", executed=not self.options.dry_run)

        if draft is not None and repo is not None:
            published = call_with_retry(
                lambda: self.client.publish_release(repo.owner, repo.project, draft.id),
                policy=self.retry_policy,
                on_retry=self._on_retry,
            )
            if isinstance(published, Err):
                return published
            if published.value:
                self.set_context({"release_url": published.value})

        self.mark_released()
        return Ok(None)

