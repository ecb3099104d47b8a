"""npm registry target.

``init`` checks the registry in parallel (ping, whoami, latest published
version) under one deadline. ``bump`` runs ``npm version`` and resolves the
dist-tag. ``release`` publishes, asking for a fresh one-time password when
the registry demands one.

Registries that do not implement ``ping`` or ``whoami`` answer with E400/E404.
Those answers count as success (with a warning) so that private registries
keep working; do not turn them into failures.
"""

from __future__ import annotations

import json
import re
from pathlib import Path

from relkit.core.config import NpmConfig, ReleaseConfig
from relkit.core.result import Err, Ok, Result
from relkit.core.structured import as_str_dict, get_bool, get_str, get_table
from relkit.core.version import parse_version
from relkit.platform.process import ProcessError
from relkit.release.concurrency import join_with_timeout
from relkit.release.errors import (
    AuthError,
    PreconditionFailed,
    ReleaseActionFailed,
    ReleaseError,
)
from relkit.release.otp import run_otp_flow
from relkit.release.plugin import Plugin
from relkit.release.steps import Prompt
from relkit.release.timeouts import REGISTRY_TIMEOUT_SECONDS

__all__ = [
    "DEFAULT_TAG",
    "DEFAULT_TAG_PRERELEASE",
    "MANIFEST_PATH",
    "NPM_BASE_URL",
    "NPM_DEFAULT_REGISTRY",
    "NpmPlugin",
]

MANIFEST_PATH = "package.json"
REGISTRY_TIMEOUT = REGISTRY_TIMEOUT_SECONDS
DEFAULT_TAG = "latest"
DEFAULT_TAG_PRERELEASE = "next"
NPM_BASE_URL = "https://www.npmjs.com"
NPM_DEFAULT_REGISTRY = "https://registry.npmjs.org"

_PING_UNSUPPORTED_RE = re.compile(r"code E40[04]|404.*(ping not found|No content for path)")
_WHOAMI_UNSUPPORTED_RE = re.compile(r"code E40[04]")
_OTP_REQUIRED_RE = re.compile(r"one-time pass", re.IGNORECASE)
_VERSION_NOT_CHANGED_RE = re.compile(r"version not changed", re.IGNORECASE)


def _needs_otp(error: ProcessError) -> bool:
    return _OTP_REQUIRED_RE.search(error.output) is not None


class NpmPlugin(Plugin[NpmConfig]):
    namespace = "npm"
    prompts = {
        "publish": Prompt("publish", "Publish ${name}@${version} (${tag}) to npm?"),
        "otp": Prompt("otp", "Please enter OTP for npm:", kind="input"),
    }

    @classmethod
    def is_enabled(cls, config: ReleaseConfig, cwd: Path) -> bool:
        return config.npm.enabled and (cwd / MANIFEST_PATH).is_file()

    @classmethod
    def select_config(cls, config: ReleaseConfig) -> NpmConfig:
        return config.npm

    # Manifest and registry

    def read_manifest(self) -> Result[dict[str, object], ReleaseError]:
        path = self.runtime.cwd / MANIFEST_PATH
        try:
            data = as_str_dict(json.loads(path.read_text(encoding="utf-8")))
        except (OSError, json.JSONDecodeError) as e:
            return Err(PreconditionFailed(target="npm", reason=f"Cannot read {MANIFEST_PATH}: {e}"))
        if data is None:
            return Err(PreconditionFailed(target="npm", reason=f"{MANIFEST_PATH} must be a JSON object"))
        return Ok(data)

    @property
    def registry(self) -> str:
        value = self.get_context("registry")
        return value if isinstance(value, str) and value else NPM_DEFAULT_REGISTRY

    def _registry_args(self) -> list[str]:
        registry = self.registry
        return ["--registry", registry] if registry != NPM_DEFAULT_REGISTRY else []

    def is_registry_up(self) -> bool:
        result = self.shell.exec(["npm", "ping", *self._registry_args()], write=False)
        if isinstance(result, Ok):
            return True
        if _PING_UNSUPPORTED_RE.search(result.error.output):
            self.console.warning("Ignoring unsupported `npm ping` command response.")
            return True
        return False

    def is_authenticated(self) -> tuple[bool, str | None]:
        """Whether ``npm whoami`` accepts the session, and the username it reports."""
        result = self.shell.exec(["npm", "whoami", *self._registry_args()], write=False)
        if isinstance(result, Ok):
            return True, result.value or None
        self.console.debug(result.error.output)
        if _WHOAMI_UNSUPPORTED_RE.search(result.error.output):
            self.console.warning("Ignoring unsupported `npm whoami` command response.")
            return True, None
        return False, None

    def get_latest_registry_version(self) -> str | None:
        name = self.get_name()
        if name is None:
            return None
        tag = self.resolve_tag(self.get_latest_version())
        result = self.shell.exec(
            ["npm", "show", f"{name}@{tag}", "version", *self._registry_args()],
            write=False,
        )
        if isinstance(result, Err) or not result.value:
            return None
        return result.value

    def get_registry_pre_release_tags(self) -> list[str]:
        name = self.get_name()
        if name is None:
            return []
        result = self.shell.exec(["npm", "view", name, "dist-tags", "--json"], write=False)
        if isinstance(result, Err):
            return []
        try:
            tags = as_str_dict(json.loads(result.value or "{}"))
        except json.JSONDecodeError as e:
            self.console.debug(f"Invalid dist-tags output: {e}")
            return []
        return [tag for tag in (tags or {}) if tag != DEFAULT_TAG]

    def guess_pre_release_tag(self) -> str:
        tags = self.get_registry_pre_release_tags()
        if tags:
            return tags[0]
        self.console.warning(
            f'Unable to get pre-release tag(s) from npm registry. Using "{DEFAULT_TAG_PRERELEASE}".'
        )
        return DEFAULT_TAG_PRERELEASE

    def resolve_tag(self, version: str | None) -> str:
        """Dist-tag for ``version``.

        Stable versions go to ``latest``. Pre-releases use the configured tag,
        then the version's own identifier (``1.0.0-next.1`` -> ``next``), then
        the first pre-release tag already on the registry, then ``next``.
        """
        parsed = parse_version(version)
        if parsed is None or not parsed.is_pre_release:
            return DEFAULT_TAG
        return self.config.tag or parsed.pre_release_id or self.guess_pre_release_tag()

    # Lifecycle

    def init(self) -> Result[None, ReleaseError]:
        manifest = self.read_manifest()
        if isinstance(manifest, Err):
            return manifest

        data = manifest.value
        publish_config = get_table(data, "publishConfig") or {}
        is_private = get_bool(data, "private") or False
        self.set_context(
            {
                "name": get_str(data, "name"),
                "latest_version": get_str(data, "version"),
                "private": is_private,
                "registry": get_str(publish_config, "registry") or NPM_DEFAULT_REGISTRY,
            }
        )

        if not self.config.publish or is_private:
            return Ok(None)
        if self.config.skip_checks:
            return Ok(None)

        checks = join_with_timeout(
            [self.is_registry_up, self.is_authenticated, self.get_latest_registry_version],
            timeout=self.config.timeout or REGISTRY_TIMEOUT,
            target="npm registry",
        )
        if isinstance(checks, Err):
            return checks

        registry_up, (authenticated, username), registry_version = checks.value
        if not registry_up:
            return Err(PreconditionFailed(target="npm", reason=f"Unable to reach npm registry ({self.registry})."))
        if not authenticated:
            return Err(
                AuthError(
                    target="npm",
                    detail="Not authenticated with npm. Please `npm login` and try again.",
                )
            )
        if username:
            self.set_context({"username": username})

        if not registry_version:
            self.set_context({"is_new_package": True})
            self.console.warning("No version found in npm registry. Assuming new package.")
        else:
            manifest_version = self.get_context("latest_version")
            if parse_version(str(registry_version)) != parse_version(str(manifest_version)):
                self.console.warning(
                    f"Latest version in registry ({registry_version}) does not match "
                    f"package.json ({manifest_version})."
                )
        return Ok(None)

    def get_latest_version(self) -> str | None:
        if self.config.ignore_version:
            return None
        value = self.get_context("latest_version")
        return value if isinstance(value, str) else None

    def bump(self, version: str) -> Result[None, ReleaseError]:
        tag = self.config.tag or self.resolve_tag(version)
        self.set_context({"version": version, "tag": tag})
        result = self.step(task=lambda: self._version(version), label="npm version")
        if isinstance(result, Err):
            return result
        return Ok(None)

    def _version(self, version: str) -> Result[None, ReleaseError]:
        result = self.shell.exec(["npm", "version", version, "--no-git-tag-version"])
        if isinstance(result, Err):
            if _VERSION_NOT_CHANGED_RE.search(result.error.output):
                self.console.warning(f"Did not update version in package.json, etc. (already at {version}).")
                return Ok(None)
            return Err(ReleaseActionFailed(action="npm version", detail=result.error.output))
        return Ok(None)

    def release(self) -> Result[None, ReleaseError]:
        if not self.config.publish:
            return Ok(None)
        if self.get_context("private"):
            self.console.warning("Skip publish: package is private.")
            return Ok(None)

        result = self.step(task=self._publish, label="npm publish", prompt="publish")
        if isinstance(result, Err):
            return result
        return Ok(None)

    def publish_command(self, otp: str | None) -> list[str]:
        name = self.get_name() or ""
        tag = str(self.get_context("tag") or DEFAULT_TAG)
        cmd = ["npm", "publish", self.config.publish_path, "--tag", tag]
        if name.startswith("@") and self.config.access:
            cmd += ["--access", self.config.access]
        if otp:
            cmd += ["--otp", otp]
        return cmd + self._registry_args()

    def _publish(self) -> Result[None, ReleaseError]:
        def submit(otp: str | None) -> Result[str, ProcessError]:
            return self.shell.exec(self.publish_command(otp))

        def request_otp() -> str | None:
            return self.runtime.steps.ask(self.prompt("otp"))

        result = run_otp_flow(
            submit=submit,
            needs_otp=_needs_otp,
            request_otp=request_otp if self.runtime.steps.is_interactive else None,
            console=self.console,
            otp=self.config.otp,
        )
        if isinstance(result, Err):
            self.console.debug(str(result.error))
            return Err(ReleaseActionFailed(action="npm publish", detail=result.error.output))

        self.mark_released()
        return Ok(None)

    def get_release_url(self) -> str | None:
        name = self.get_name()
        if name is None:
            return None
        registry = self.registry
        base = registry if registry != NPM_DEFAULT_REGISTRY else NPM_BASE_URL
        return f"{base.rstrip('/')}/package/{name}"
