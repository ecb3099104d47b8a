"""Run independent checks together and join them with one deadline."""

from __future__ import annotations

import threading
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import TypeVar, cast

from relkit.core.result import Err, Ok, Result
from relkit.release.errors import PreconditionTimeout

T = TypeVar("T")

__all__ = ["join_with_timeout"]


@dataclass
class _Slot[T]:
    done: threading.Event = field(default_factory=threading.Event)
    value: T | None = None
    error: Exception | None = None


def _run_into(task: Callable[[], T], slot: _Slot[T]) -> None:
    try:
        slot.value = task()
    except Exception as e:  # noqa: BLE001
        slot.error = e
    finally:
        slot.done.set()


def join_with_timeout(
    tasks: Sequence[Callable[[], T]],
    *,
    timeout: float | None,
    target: str,
) -> Result[tuple[T, ...], PreconditionTimeout]:
    """Run ``tasks`` concurrently and return their results in task order.

    If the deadline passes first, ``PreconditionTimeout(target, timeout)`` is
    returned immediately. Tasks still running are abandoned: they run on
    daemon threads, so neither this call nor interpreter exit waits for them,
    and their results are discarded. Exceptions raised by a task propagate.
    """
    if not tasks:
        return Ok(())

    slots: list[_Slot[T]] = []
    for i, task in enumerate(tasks):
        slot: _Slot[T] = _Slot()
        slots.append(slot)
        threading.Thread(
            target=_run_into,
            args=(task, slot),
            name=f"relkit-check-{i}",
            daemon=True,
        ).start()

    deadline = None if timeout is None else time.monotonic() + timeout
    for slot in slots:
        remaining = None if deadline is None else max(0.0, deadline - time.monotonic())
        if not slot.done.wait(remaining):
            return Err(PreconditionTimeout(target=target, seconds=timeout or 0.0))

    for slot in slots:
        if slot.error is not None:
            raise slot.error
    return Ok(tuple(cast(T, slot.value) for slot in slots))
