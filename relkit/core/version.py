from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Literal


Increment = Literal["major", "minor", "patch", "premajor", "preminor", "prepatch", "prerelease"]

INCREMENTS: tuple[Increment, ...] = (
    "major",
    "minor",
    "patch",
    "premajor",
    "preminor",
    "prepatch",
    "prerelease",
)

_VERSION_RE = re.compile(
    r"^v?(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)"
    r"(?:-([0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?"
    r"(?:\+([0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?$"
)


@dataclass(frozen=True, slots=True)
class Version:
    major: int
    minor: int
    patch: int
    pre_release: tuple[str, ...] = ()
    build: tuple[str, ...] = field(default=(), compare=False)

    @property
    def is_pre_release(self) -> bool:
        return bool(self.pre_release)

    @property
    def pre_release_id(self) -> str | None:
        """Leading pre-release identifier when it is not numeric (``next`` in ``1.0.0-next.1``)."""
        if self.pre_release and not self.pre_release[0].isdigit():
            return self.pre_release[0]
        return None

    def __str__(self) -> str:
        text = f"{self.major}.{self.minor}.{self.patch}"
        if self.pre_release:
            text += "-" + ".".join(self.pre_release)
        if self.build:
            text += "+" + ".".join(self.build)
        return text

    def increment(self, kind: Increment, pre_id: str | None = None) -> Version:
        base = (self.major, self.minor, self.patch)
        match kind:
            case "major":
                if self.pre_release and self.minor == 0 and self.patch == 0:
                    return Version(*base)
                return Version(self.major + 1, 0, 0)
            case "minor":
                if self.pre_release and self.patch == 0:
                    return Version(*base)
                return Version(self.major, self.minor + 1, 0)
            case "patch":
                if self.pre_release:
                    return Version(*base)
                return Version(self.major, self.minor, self.patch + 1)
            case "premajor":
                return Version(self.major + 1, 0, 0, _first_pre(pre_id))
            case "preminor":
                return Version(self.major, self.minor + 1, 0, _first_pre(pre_id))
            case "prepatch":
                return Version(self.major, self.minor, self.patch + 1, _first_pre(pre_id))
            case "prerelease":
                if not self.pre_release:
                    return self.increment("prepatch", pre_id)
                return Version(*base, _next_pre(self.pre_release, pre_id))
            case _:
                raise AssertionError(f"unexpected increment: {kind}")


def _first_pre(pre_id: str | None) -> tuple[str, ...]:
    return (pre_id, "0") if pre_id else ("0",)


def _next_pre(current: tuple[str, ...], pre_id: str | None) -> tuple[str, ...]:
    if pre_id and current[0] != pre_id:
        return (pre_id, "0")

    parts = list(current)
    for i in range(len(parts) - 1, -1, -1):
        if parts[i].isdigit():
            parts[i] = str(int(parts[i]) + 1)
            return tuple(parts)
    parts.append("0")
    return tuple(parts)


def parse_version(text: str | None) -> Version | None:
    """Parse a semantic version, tolerating a leading ``v``.

    Returns None for anything that is not a full ``MAJOR.MINOR.PATCH`` version.
    """
    if not text:
        return None
    m = _VERSION_RE.match(text.strip())
    if m is None:
        return None
    pre = tuple(m.group(4).split(".")) if m.group(4) else ()
    build = tuple(m.group(5).split(".")) if m.group(5) else ()
    return Version(int(m.group(1)), int(m.group(2)), int(m.group(3)), pre, build)


def is_increment(text: str) -> bool:
    return text in INCREMENTS


def resolve_next_version(
    latest: str | None,
    increment: str | None,
    pre_id: str | None = None,
) -> Version | None:
    """Return the version to release.

    ``increment`` is either an explicit version (used as is) or one of
    ``INCREMENTS`` applied to ``latest``. A missing latest version counts as
    ``0.0.0``. Returns None when neither interpretation works.
    """
    requested = (increment or "patch").strip()
    explicit = parse_version(requested)
    if explicit is not None:
        return explicit

    if not is_increment(requested):
        return None

    current = parse_version(latest) or Version(0, 0, 0)
    for kind in INCREMENTS:
        if kind == requested:
            return current.increment(kind, pre_id or None)
    return None
