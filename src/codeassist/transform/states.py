"""Conversation states and the transition table for transformation chats."""

from __future__ import annotations

from enum import Enum


class ConversationState(Enum):
    """State of the transformation conversation in the active chat tab."""

    IDLE = "idle"
    WAITING_FOR_TRANSFORMATION_OBJECTIVE = "waiting_for_transformation_objective"
    WAITING_FOR_PROJECT_SELECTION = "waiting_for_project_selection"  # Forms and files
    PROMPT_SOURCE_JAVA_HOME = "prompt_source_java_home"
    PROMPT_TARGET_JAVA_HOME = "prompt_target_java_home"
    COMPILING = "compiling"
    JOB_SUBMITTED = "job_submitted"
    WAITING_FOR_HIL_INPUT = "waiting_for_hil_input"

    @property
    def job_in_flight(self) -> bool:
        """True while a build or remote job is running (HIL pauses a running job)."""
        return self in (
            ConversationState.COMPILING,
            ConversationState.JOB_SUBMITTED,
            ConversationState.WAITING_FOR_HIL_INPUT,
        )


class TransformObjective(Enum):
    """The two supported transformation flows."""

    LANGUAGE_UPGRADE = "language upgrade"
    SQL_CONVERSION = "sql conversion"

    @classmethod
    def parse(cls, text: str) -> TransformObjective | None:
        """Match a chat message against the objectives (trimmed, case-insensitive)."""
        normalized = text.strip().lower()
        for objective in cls:
            if objective.value == normalized:
                return objective
        return None


class JDKVersion(Enum):
    """Java versions a language upgrade can move between."""

    JDK8 = "8"
    JDK11 = "11"
    JDK17 = "17"
    JDK21 = "21"

    @property
    def number(self) -> int:
        return int(self.value)

    @classmethod
    def parse(cls, value: str | JDKVersion) -> JDKVersion:
        if isinstance(value, JDKVersion):
            return value
        text = str(value).strip().upper().removeprefix("JDK").removeprefix("JAVA")
        return cls(text.strip())


_S = ConversationState

# Forward transitions; every state may also return to IDLE
TRANSITIONS: dict[ConversationState, frozenset[ConversationState]] = {
    _S.IDLE: frozenset(
        {
            _S.WAITING_FOR_TRANSFORMATION_OBJECTIVE,
            _S.WAITING_FOR_PROJECT_SELECTION,
        }
    ),
    _S.WAITING_FOR_TRANSFORMATION_OBJECTIVE: frozenset(
        {_S.WAITING_FOR_PROJECT_SELECTION}
    ),
    _S.WAITING_FOR_PROJECT_SELECTION: frozenset(
        {
            _S.WAITING_FOR_TRANSFORMATION_OBJECTIVE,
            _S.PROMPT_SOURCE_JAVA_HOME,
            _S.JOB_SUBMITTED,
        }
    ),
    _S.PROMPT_SOURCE_JAVA_HOME: frozenset(
        {_S.PROMPT_TARGET_JAVA_HOME, _S.COMPILING}
    ),
    _S.PROMPT_TARGET_JAVA_HOME: frozenset({_S.COMPILING}),
    # Back to the JAVA_HOME prompt when credentials expire during the build
    _S.COMPILING: frozenset(
        {_S.JOB_SUBMITTED, _S.PROMPT_SOURCE_JAVA_HOME, _S.PROMPT_TARGET_JAVA_HOME}
    ),
    _S.JOB_SUBMITTED: frozenset({_S.WAITING_FOR_HIL_INPUT}),
    _S.WAITING_FOR_HIL_INPUT: frozenset({_S.JOB_SUBMITTED}),
}


def next_states(state: ConversationState) -> frozenset[ConversationState]:
    """States reachable from ``state`` in one transition."""
    return TRANSITIONS.get(state, frozenset()) | {ConversationState.IDLE}


def can_transition(source: ConversationState, target: ConversationState) -> bool:
    """True when ``source`` -> ``target`` is in the table (or a no-op)."""
    return source == target or target in next_states(source)
