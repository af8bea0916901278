"""Validation of user-supplied paths and files for transformation jobs.

Covers JAVA_HOME paths typed in chat, the custom dependency-versions YAML
file, and the SQL conversion metadata archive (a zip holding an ``.sct``
XML project file).
"""

from __future__ import annotations

import xml.etree.ElementTree as ET
import zipfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from codeassist.logging import get_logger

log = get_logger("transform.files")

SUPPORTED_SOURCE_DBS = frozenset({"ORACLE"})
SUPPORTED_TARGET_DBS = frozenset({"AURORA_POSTGRESQL", "RDS_POSTGRESQL"})

CUSTOM_VERSIONS_EXTENSIONS = ["yaml", "yml"]
SQL_METADATA_EXTENSIONS = ["zip"]

_VERSION_ENTRY_KEYS = ("identifier", "targetVersion", "originType")
_ORIGIN_TYPES = frozenset({"FIRST_PARTY", "THIRD_PARTY"})


class InvalidFileError(ValueError):
    """A user-supplied file failed validation.

    Attributes:
        code: Error response code shown to the user.
    """

    def __init__(self, code: str, detail: str = "") -> None:
        super().__init__(detail or code)
        self.code = code


def extract_java_home(text: str) -> str | None:
    """Resolve a chat message to an existing directory.

    Examples:
        extract_java_home(" /usr/lib/jvm/java-17\\n") -> "/usr/lib/jvm/java-17"
        extract_java_home("/no/such/dir") -> None
        extract_java_home("/etc/hosts") -> None  (not a directory)
    """
    candidate = text.strip()
    if not candidate:
        return None
    resolved = Path(candidate).expanduser().resolve()
    return str(resolved) if resolved.is_dir() else None


def validate_custom_versions_file(contents: str) -> bool:
    """Check a custom dependency-versions file.

    Expected shape::

        dependencyManagement:
          dependencies:
            - identifier: "com.example:lib"
              targetVersion: "2.1.0"
              originType: "THIRD_PARTY"
          plugins:
            - identifier: "org.apache.maven.plugins:maven-compiler-plugin"
              targetVersion: "3.13.0"
              originType: "FIRST_PARTY"
    """
    try:
        data = yaml.safe_load(contents)
    except yaml.YAMLError as e:
        log.info("Custom versions file is not valid YAML: %s", e)
        return False

    if not isinstance(data, dict):
        return False
    management = data.get("dependencyManagement")
    if not isinstance(management, dict):
        log.info("Custom versions file is missing dependencyManagement")
        return False

    entries: list[Any] = []
    for section in ("dependencies", "plugins"):
        value = management.get(section) or []
        if not isinstance(value, list):
            return False
        entries.extend(value)

    if not entries:
        log.info("Custom versions file lists no dependencies or plugins")
        return False

    for entry in entries:
        if not isinstance(entry, dict):
            return False
        missing = [key for key in _VERSION_ENTRY_KEYS if not entry.get(key)]
        if missing:
            log.info("Custom versions entry is missing %s", ", ".join(missing))
            return False
        if str(entry["originType"]).upper() not in _ORIGIN_TYPES:
            log.info("Custom versions entry has unknown originType %s", entry["originType"])
            return False
    return True


def read_sct_from_zip(zip_path: str) -> str:
    """Return the text of the first ``.sct`` entry in a metadata archive.

    Raises:
        InvalidFileError: ``invalid-zip-no-sct-file`` when the archive is
            unreadable or holds no ``.sct`` file, ``error-parsing-sct-file``
            when the ``.sct`` entry is not UTF-8 text.
    """
    try:
        with zipfile.ZipFile(zip_path) as archive:
            for name in archive.namelist():
                if Path(name).name.endswith(".sct"):
                    data = archive.read(name)
                    break
            else:
                raise InvalidFileError("invalid-zip-no-sct-file")
    except (zipfile.BadZipFile, OSError) as e:
        raise InvalidFileError("invalid-zip-no-sct-file", str(e)) from e

    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as e:
        raise InvalidFileError("error-parsing-sct-file", str(e)) from e


@dataclass
class SqlMetadata:
    """Facts read from an SQL conversion metadata file."""

    source_db: str
    target_db: str
    source_server_name: str
    schema_options: list[str] = field(default_factory=list)


def parse_sql_metadata(contents: str) -> SqlMetadata:
    """Parse and validate ``.sct`` metadata.

    Raises:
        InvalidFileError: ``error-parsing-sct-file``, ``unsupported-source-db``
            or ``unsupported-target-db``.
    """
    try:
        root = ET.fromstring(contents)
    except ET.ParseError as e:
        raise InvalidFileError("error-parsing-sct-file", str(e)) from e

    entities = root.find("instances/ProjectModel/entities")
    source = entities.find("sources/DbServer") if entities is not None else None
    target = entities.find("targets/DbServer") if entities is not None else None
    if source is None or target is None:
        raise InvalidFileError("error-parsing-sct-file", "missing source or target server")

    source_db = source.get("vendor", "").strip().upper()
    target_db = target.get("vendor", "").strip().upper()
    if source_db not in SUPPORTED_SOURCE_DBS:
        raise InvalidFileError("unsupported-source-db", source_db)
    if target_db not in SUPPORTED_TARGET_DBS:
        raise InvalidFileError("unsupported-target-db", target_db)

    schemas: set[str] = set()
    for node in root.iterfind(
        "instances/ProjectModel/relations/server-node-location/"
        "FullNameNodeInfoList/nameParts/FullNameNodeInfo"
    ):
        if node.get("typeNode", "").lower() == "schema" and node.get("nameNode"):
            schemas.add(node.get("nameNode", "").upper())

    return SqlMetadata(
        source_db=source_db,
        target_db=target_db,
        source_server_name=source.get("name", "").strip(),
        schema_options=sorted(schemas),
    )
