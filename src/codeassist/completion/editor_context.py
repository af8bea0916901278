"""Builds completion requests from editor document state."""

from __future__ import annotations

import asyncio
from pathlib import PurePath
from typing import TYPE_CHECKING, Any

from codeassist.completion.models import (
    CancellationToken,
    CompletionRequest,
    DocumentState,
    FileContext,
    Position,
    SupplementalContextItem,
    TriggerContext,
)
from codeassist.config.schema import CompletionConfig
from codeassist.logging import get_logger

if TYPE_CHECKING:
    from codeassist.completion.protocols import SupplementalContextSource

log = get_logger("completion.context")

SUPPORTED_LANGUAGES = frozenset(
    {
        "c",
        "cpp",
        "csharp",
        "go",
        "java",
        "javascript",
        "jsx",
        "kotlin",
        "php",
        "python",
        "ruby",
        "rust",
        "scala",
        "shell",
        "sql",
        "tsx",
        "typescript",
        "json",
        "yaml",
        "tf",
        "hcl",
        "plaintext",
    }
)

# Extensions accepted even when the editor language is not recognized
SUPPORTED_FILE_FORMATS = frozenset({"json", "yaml", "yml", "tf", "hcl", "sh", "sql"})

LANGUAGE_ALIASES = {
    "javascriptreact": "jsx",
    "typescriptreact": "tsx",
    "golang": "go",
    "shellscript": "shell",
    "sh": "shell",
    "bash": "shell",
    "terraform": "tf",
    "yml": "yaml",
}

NOTEBOOK_CELL_EXTENSIONS = {
    "python": ".py",
    "java": ".java",
    "scala": ".scala",
    "sql": ".sql",
    "javascript": ".js",
    "typescript": ".ts",
    "shellscript": ".sh",
}

# A JSON document without these is sent as plain text
_CFN_KEYWORDS = ("AWSTemplateFormatVersion", "Resources", "AWS::", "Description")
_CFN_KEYWORDS_CASE_INSENSITIVE = ("cdk",)


def normalize_language(language_id: str) -> str:
    return LANGUAGE_ALIASES.get(language_id, language_id)


def is_plain_json(language_id: str, left_content: str) -> bool:
    """True for a JSON document whose left context has no template keywords."""
    if language_id != "json":
        return False
    if any(keyword in left_content for keyword in _CFN_KEYWORDS):
        return False
    lowered = left_content.lower()
    return not any(keyword in lowered for keyword in _CFN_KEYWORDS_CASE_INSENSITIVE)


def get_file_relative_path(document: DocumentState, config: CompletionConfig) -> str:
    """Document path relative to its workspace root, truncated for the request.

    Notebook files are renamed with the extension of the cell language so the
    backend completes code in that language.
    """
    path = PurePath(document.path)
    relative = path.name
    if document.workspace_root:
        try:
            relative = path.relative_to(document.workspace_root).as_posix()
        except ValueError:
            relative = path.name

    if relative.endswith(".ipynb"):
        extension = NOTEBOOK_CELL_EXTENSIONS.get(document.language_id)
        if extension is not None:
            relative = relative[: -len(".ipynb")] + extension

    return relative[: config.filename_chars_limit]


def extract_file_context(
    document: DocumentState,
    position: Position,
    config: CompletionConfig,
) -> FileContext:
    """Text on both sides of the cursor, each capped at the characters limit."""
    offset = document.offset_at(position)
    limit = config.characters_limit
    left = document.text[max(0, offset - limit) : offset]
    right = document.text[offset : offset + limit]

    if is_plain_json(document.language_id, left):
        language_name = "plaintext"
    else:
        language_name = normalize_language(document.language_id)

    return FileContext(
        filename=get_file_relative_path(document, config),
        language_name=language_name,
        left_file_content=left,
        right_file_content=right,
    )


def get_editor_state(
    document: DocumentState,
    position: Position,
    file_context: FileContext,
) -> dict[str, Any]:
    """Document and cursor snapshot attached to the request."""
    return {
        "document": {
            "programmingLanguage": {"languageName": file_context.language_name},
            "relativeFilePath": file_context.filename,
            "text": document.text,
        },
        "cursorState": {
            "position": {"line": position.line, "character": position.character},
        },
    }


async def gather_supplemental_context(
    source: SupplementalContextSource | None,
    document: DocumentState,
    position: Position,
    timeout: float,
) -> list[SupplementalContextItem]:
    """Fetch supplemental context under a deadline.

    A timeout or a failing source yields no context; the request goes out
    without it.
    """
    if source is None:
        return []

    token = CancellationToken()
    try:
        items = await asyncio.wait_for(source.fetch(document, position, token), timeout)
    except asyncio.TimeoutError:
        token.cancel()
        log.debug("Supplemental context timed out after %.3fs", timeout)
        return []
    except Exception as e:
        log.warning("Supplemental context fetch failed: %s", e)
        return []

    for index, item in enumerate(items):
        log.debug(
            "Supplemental chunk %d: path=%s length=%d score=%s",
            index,
            item.file_path,
            len(item.content),
            item.score,
        )
    return list(items)


async def build_completion_request(
    document: DocumentState,
    position: Position,
    trigger_context: TriggerContext,
    *,
    config: CompletionConfig,
    supplemental_source: SupplementalContextSource | None = None,
) -> CompletionRequest:
    """Build the first-page request for a fetch cycle."""
    file_context = extract_file_context(document, position, config)
    supplemental = await gather_supplemental_context(
        supplemental_source, document, position, config.supplemental_context_timeout
    )
    return CompletionRequest(
        file_context=file_context,
        editor_state=get_editor_state(document, position, file_context),
        max_results=config.max_results,
        trigger_kind=trigger_context.trigger_kind,
        supplemental_contexts=supplemental,
        allow_code_with_reference=config.allow_code_with_reference,
    )


def validate_request(request: CompletionRequest, config: CompletionConfig) -> bool:
    """Check a request against the backend's input constraints."""
    file_context = request.file_context
    language = file_context.language_name
    extension = file_context.filename.rsplit(".", 1)[-1] if "." in file_context.filename else ""

    language_valid = 1 <= len(language) <= 128 and (
        language in SUPPORTED_LANGUAGES or extension in SUPPORTED_FILE_FORMATS
    )
    filename_valid = len(file_context.filename) >= 1
    context_valid = (
        len(file_context.left_file_content) <= config.characters_limit
        and len(file_context.right_file_content) <= config.characters_limit
    )
    return language_valid and filename_valid and context_valid


def get_left_context(document: DocumentState, line: int, preview_len: int) -> str:
    """Preview of a line, keeping its tail when it is too long."""
    try:
        text = document.line_at(line)
    except IndexError as e:
        log.error("Error getting left context: %s", e)
        return ""
    if len(text) > preview_len:
        text = "..." + text[len(text) - preview_len - 1 : len(text) - 1]
    return text
