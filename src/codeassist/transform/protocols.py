"""Collaborator protocols consumed by the transformation controller.

Implementations wrap the backend client, the local build and the editor;
each may raise ``codeassist.errors.TransformError``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from codeassist.transform.session import CandidateProject, TransformationJob
    from codeassist.transform.states import TransformObjective


@dataclass(frozen=True)
class AuthState:
    """Connection state of the assistant backend."""

    state: str  # "connected", "expired", "disconnected"

    @property
    def connected(self) -> bool:
        return self.state == "connected"


class AuthProvider(Protocol):
    async def get_auth_state(self) -> AuthState:
        ...

    def handle_auth(self, auth_type: str) -> None:
        """Start the re-authentication flow for ``auth_type``."""
        ...


class TransformJobControl(Protocol):
    """Local build and remote job operations."""

    async def detect_eligible_projects(
        self, objective: TransformObjective
    ) -> list[CandidateProject]:
        """Probe open projects eligible for ``objective``.

        Raises:
            TransformError: NO_PROJECT_OPEN, NO_JAVA_PROJECT or NO_MAVEN_PROJECT.
        """
        ...

    async def compile_locally(self, job: TransformationJob) -> None:
        ...

    async def check_build_file(self, job: TransformationJob) -> None:
        """Inspect the build file before upload.

        Raises:
            TransformError: ABSOLUTE_PATH_DETECTED (warning only).
        """
        ...

    async def start_remote_job(self, job: TransformationJob) -> str:
        """Upload and start the job; returns the remote job id.

        Raises:
            TransformError: MODULE_UPLOAD or JOB_START.
        """
        ...

    async def stop_remote_job(self, job_id: str | None) -> None:
        """Stop the job and clean up local artifacts."""
        ...

    async def resume_with_dependency(self, selection: str | None) -> None:
        """Finish the HIL pause; ``None`` resumes without an override."""
        ...

    async def open_build_log(self) -> None:
        ...

    async def open_hil_pom_file(self) -> None:
        ...


class IdeActions(Protocol):
    """Editor actions the conversation triggers."""

    async def pick_file(self, title: str, extensions: list[str]) -> str | None:
        """Show a file picker; None when dismissed."""
        ...

    async def read_text(self, path: str) -> str:
        ...

    async def open_url(self, url: str) -> None:
        ...

    async def execute_command(self, command: str) -> None:
        ...
