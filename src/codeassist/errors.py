"""Error taxonomy for transformation flows.

External collaborators raise ``TransformError`` tagged with an ``ErrorKind``.
The controller converts every failure at its handler boundary into one of
these kinds; the kind decides the user-facing response and whether the
conversation resets.
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(Enum):
    """Kinds of transformation failure."""

    # No eligible projects, by variant
    NO_PROJECT_OPEN = "no_project_open"
    NO_JAVA_PROJECT = "no_java_project"
    NO_MAVEN_PROJECT = "no_maven_project"

    ABSOLUTE_PATH_DETECTED = "absolute_path_detected"  # Warning only
    ALTERNATE_VERSIONS_NOT_FOUND = "alternate_versions_not_found"  # HIL
    MODULE_UPLOAD = "module_upload"
    JOB_START = "job_start"
    PRE_BUILD = "pre_build"
    AUTH = "auth"  # Not connected

    @property
    def is_no_projects(self) -> bool:
        return self in _NO_PROJECT_KINDS

    @property
    def is_fatal(self) -> bool:
        """True when the kind ends the current job."""
        return self in (ErrorKind.MODULE_UPLOAD, ErrorKind.JOB_START)


_NO_PROJECT_KINDS = frozenset(
    {ErrorKind.NO_PROJECT_OPEN, ErrorKind.NO_JAVA_PROJECT, ErrorKind.NO_MAVEN_PROJECT}
)

# Error response codes the UI layer renders as remediation messages
NO_PROJECT_RESPONSE_CODES: dict[ErrorKind, str] = {
    ErrorKind.NO_PROJECT_OPEN: "no-project-found",
    ErrorKind.NO_JAVA_PROJECT: "no-java-project-found",
    ErrorKind.NO_MAVEN_PROJECT: "no-maven-java-project-found",
}


class TransformError(Exception):
    """A tagged transformation failure.

    Attributes:
        kind: The error kind.
        detail: Human-readable detail, surfaced verbatim for warnings.
    """

    def __init__(self, kind: ErrorKind, detail: str = "") -> None:
        super().__init__(detail or kind.value)
        self.kind = kind
        self.detail = detail

    def __repr__(self) -> str:
        return f"TransformError({self.kind.name}, {self.detail!r})"


class AuthError(TransformError):
    """Raised by the auth guard when the user is not connected."""

    def __init__(self, state: str) -> None:
        super().__init__(ErrorKind.AUTH, f"Not connected (auth state: {state})")
        self.state = state
