from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

from relkit.core.config import GitConfig, ReleaseConfig
from relkit.core.result import Err, Ok, Result
from relkit.git.repository import GitError
from relkit.plugins.git_base import GitBasePlugin
from relkit.release.errors import PreconditionFailed, ReleaseActionFailed, ReleaseError
from relkit.release.steps import Prompt


def _failed(action: str, error: GitError) -> Err[ReleaseError]:
    return Err(ReleaseActionFailed(action=action, detail=error.message))


class GitPlugin(GitBasePlugin[GitConfig]):
    """Commit the version bump, tag it and push."""

    namespace = "git"
    prompts = {
        "commit": Prompt("commit", "Commit (${commit_message})?"),
        "tag": Prompt("tag", "Tag (${tag_name})?"),
        "push": Prompt("push", "Push?"),
    }

    @classmethod
    def is_enabled(cls, config: ReleaseConfig, cwd: Path) -> bool:
        return config.git.enabled and (cwd / ".git").exists()

    @classmethod
    def select_config(cls, config: ReleaseConfig) -> GitConfig:
        return config.git

    def configured_remote_url(self) -> str | None:
        return self.config.remote_url

    def tag_name_template(self) -> str | None:
        return self.config.tag_name

    def init(self) -> Result[None, ReleaseError]:
        if self.config.require_clean:
            clean = self.repo.is_clean()
            if isinstance(clean, Err):
                return Err(PreconditionFailed(target="git", reason=clean.error.message))
            if not clean.value:
                return Err(
                    PreconditionFailed(
                        target="git",
                        reason="Working dir must be clean.",
                    )
                )

        if self.config.require_upstream and not self.repo.has_upstream():
            return Err(
                PreconditionFailed(
                    target="git",
                    reason="No upstream configured for current branch.",
                )
            )

        self.init_git()
        return Ok(None)

    def bump(self, version: str) -> Result[None, ReleaseError]:
        self.bump_git(version)
        self.set_context(
            {
                "commit_message": self.format(self.config.commit_message),
                "tag_annotation": self.format(self.config.tag_annotation),
            }
        )
        return Ok(None)

    def release(self) -> Result[None, ReleaseError]:
        actions = [
            (task, label, prompt)
            for enabled, task, label, prompt in (
                (self.config.commit, self._commit, "Git commit", "commit"),
                (self.config.tag, self._tag, "Git tag", "tag"),
                (self.config.push, self._push, "Git push", "push"),
            )
            if enabled
        ]
        for i, (task, label, prompt) in enumerate(actions):
            # Released only once the last enabled action has actually run.
            if i == len(actions) - 1:
                task = self._released_after(task)
            result = self.step(task=task, label=label, prompt=prompt)
            if isinstance(result, Err):
                return result
        return Ok(None)

    def _released_after(
        self, task: Callable[[], Result[None, ReleaseError]]
    ) -> Callable[[], Result[None, ReleaseError]]:
        def run() -> Result[None, ReleaseError]:
            result = task()
            if isinstance(result, Ok):
                self.mark_released()
            return result

        return run

    def _commit(self) -> Result[None, ReleaseError]:
        staged = self.repo.stage_tracked()
        if isinstance(staged, Err):
            return _failed("git add", staged.error)

        message = str(self.get_context("commit_message") or "")
        committed = self.repo.commit(message)
        if isinstance(committed, Err):
            if "nothing to commit" in committed.error.message:
                self.console.warning("No changes to commit. The latest commit will be tagged.")
                return Ok(None)
            return _failed("git commit", committed.error)
        return Ok(None)

    def _tag(self) -> Result[None, ReleaseError]:
        tag_name = self.tag_name()
        if tag_name is None:
            return Err(ReleaseActionFailed(action="git tag", detail="no tag name resolved"))

        annotation = str(self.get_context("tag_annotation") or tag_name)
        tagged = self.repo.tag(tag_name, annotation)
        if isinstance(tagged, Err):
            if "already exists" in tagged.error.message:
                self.console.warning(f"Tag {tag_name} already exists.")
                return Ok(None)
            return _failed("git tag", tagged.error)
        return Ok(None)

    def _push(self) -> Result[None, ReleaseError]:
        pushed = self.repo.push(self.config.push_repo)
        if isinstance(pushed, Err):
            return _failed("git push", pushed.error)
        return Ok(None)
