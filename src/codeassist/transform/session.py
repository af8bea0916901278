"""Transformation session state and its per-extension storage."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from codeassist.logging import get_logger
from codeassist.transform.states import ConversationState, JDKVersion, TransformObjective

log = get_logger("transform")


@dataclass
class CandidateProject:
    """A local project eligible for transformation."""

    name: str
    path: str
    java_version: str | None = None

    @classmethod
    def from_path(cls, path: str, java_version: str | None = None) -> CandidateProject:
        return cls(name=Path(path).name, path=path, java_version=java_version)


@dataclass
class TransformationJob:
    """Parameters collected during the conversation for the remote job."""

    objective: TransformObjective | None = None
    project_path: str | None = None
    source_jdk: JDKVersion | None = None
    target_jdk: JDKVersion | None = None
    source_java_home: str | None = None
    target_java_home: str | None = None
    custom_build_command: str | None = None
    custom_versions_file: str | None = None
    # SQL conversion
    metadata_path: str | None = None
    source_db: str | None = None
    target_db: str | None = None
    source_server_name: str | None = None
    schema_options: list[str] = field(default_factory=list)
    schema: str | None = None
    job_id: str | None = None

    @property
    def project_name(self) -> str:
        return Path(self.project_path).name if self.project_path else ""


@dataclass
class TransformationSession:
    """Conversation state for the active chat tab.

    Only the controller mutates a session; message formatting may read it.
    """

    tab_id: str | None = None
    conversation_state: ConversationState = ConversationState.IDLE
    candidate_projects: dict[str, CandidateProject] = field(default_factory=dict)
    is_authenticating: bool = False
    job: TransformationJob = field(default_factory=TransformationJob)

    def update_candidate_projects(self, projects: list[CandidateProject]) -> None:
        """Replace candidates, keyed by project path in detection order."""
        self.candidate_projects = {project.path: project for project in projects}


class ChatSessionStorage:
    """Holds the single transformation session of an extension instance.

    The session is created lazily. Removing the active tab drops it, so the
    next access starts a fresh conversation. Known JAVA_HOME paths outlive
    sessions.
    """

    def __init__(self) -> None:
        self._session: TransformationSession | None = None
        self.java_homes: dict[JDKVersion, str] = {}

    @property
    def has_session(self) -> bool:
        return self._session is not None

    def get_session(self) -> TransformationSession:
        if self._session is None:
            self._session = TransformationSession()
            log.debug("Transformation session created")
        return self._session

    def set_active_tab(self, tab_id: str | None) -> str | None:
        """Point the session at ``tab_id`` and return the active tab."""
        session = self.get_session()
        if tab_id:
            session.tab_id = tab_id
        return session.tab_id

    def remove_active_tab(self) -> None:
        if self._session is not None and self._session.tab_id is not None:
            log.debug("Transformation session for tab %s removed", self._session.tab_id)
            self._session = None

    def new_session(self, tab_id: str | None = None) -> TransformationSession:
        """Replace the session (start a new transformation), keeping the tab."""
        previous_tab = self._session.tab_id if self._session else None
        self._session = TransformationSession(tab_id=tab_id or previous_tab)
        return self._session
