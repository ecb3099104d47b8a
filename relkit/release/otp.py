"""One-time password re-entry as an explicit state machine.

    SUBMITTING --ok--------------------------------------> ACCEPTED
    SUBMITTING --otp required, input available-----------> AWAITING_INPUT
    SUBMITTING --other error / no input / limit reached--> REJECTED
    AWAITING_INPUT --new otp-----------------------------> SUBMITTING
    AWAITING_INPUT --no answer---------------------------> REJECTED

The last submission result is the flow's result.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, replace
from enum import Enum, auto
from typing import TypeVar

from relkit.core.result import Ok, Result
from relkit.output.console import ConsoleProtocol

T = TypeVar("T")
E = TypeVar("E")

__all__ = ["OtpSession", "OtpState", "run_otp_flow"]

DEFAULT_MAX_SUBMISSIONS = 3


class OtpState(Enum):
    AWAITING_INPUT = auto()
    SUBMITTING = auto()
    ACCEPTED = auto()
    REJECTED = auto()


@dataclass(frozen=True, slots=True)
class OtpSession[T, E]:
    state: OtpState
    otp: str | None
    submissions: int = 0
    result: Result[T, E] | None = None


def run_otp_flow(
    *,
    submit: Callable[[str | None], Result[T, E]],
    needs_otp: Callable[[E], bool],
    request_otp: Callable[[], str | None] | None,
    console: ConsoleProtocol,
    otp: str | None = None,
    max_submissions: int = DEFAULT_MAX_SUBMISSIONS,
) -> Result[T, E]:
    """Submit, asking for a fresh one-time password whenever one is required.

    Args:
        submit: The operation, given the current OTP (or None).
        needs_otp: Whether a failure means "OTP missing or wrong".
        request_otp: Asks the user for a new OTP; None in non-interactive runs.
        console: Receives the warning about an incorrect OTP.
        otp: OTP for the first submission.
        max_submissions: Upper bound on submissions.
    """

    def on_submitting(s: OtpSession[T, E]) -> OtpSession[T, E]:
        result = submit(s.otp)
        submitted = replace(s, submissions=s.submissions + 1, result=result)
        if isinstance(result, Ok):
            return replace(submitted, state=OtpState.ACCEPTED)

        if not needs_otp(result.error):
            return replace(submitted, state=OtpState.REJECTED)

        if s.otp is not None:
            console.warning("The provided OTP is incorrect or has expired.")
        if request_otp is None or submitted.submissions >= max_submissions:
            return replace(submitted, state=OtpState.REJECTED)
        return replace(submitted, state=OtpState.AWAITING_INPUT)

    def on_awaiting_input(s: OtpSession[T, E]) -> OtpSession[T, E]:
        assert request_otp is not None
        answer = request_otp()
        if not answer:
            return replace(s, state=OtpState.REJECTED)
        return replace(s, state=OtpState.SUBMITTING, otp=answer)

    handlers: Mapping[OtpState, Callable[[OtpSession[T, E]], OtpSession[T, E]]] = {
        OtpState.SUBMITTING: on_submitting,
        OtpState.AWAITING_INPUT: on_awaiting_input,
    }

    session: OtpSession[T, E] = OtpSession(state=OtpState.SUBMITTING, otp=otp)
    while session.state in handlers:
        session = handlers[session.state](session)

    if session.result is None:
        raise AssertionError("otp flow finished without a submission")
    return session.result
