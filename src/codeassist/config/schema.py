"""Configuration schema dataclasses for codeassist.

Defines the structure of configuration at all levels (system, user, project).
All fields have defaults so partial configs merge together.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str | None = None  # DEBUG, INFO, WARNING, ERROR
    verbose: int | None = None  # 0..4, overrides level
    file: str | None = None  # Log file path


@dataclass
class CompletionConfig:
    """Inline completion request and paging configuration.

    Example config.yaml:
        completion:
          max_pages: 5
          supplemental_context_timeout: 0.2
          allow_code_with_reference: false
    """

    max_pages: int = 10  # Upper bound on continuation requests per fetch cycle
    max_results: int = 5  # Candidates requested per page
    characters_limit: int = 10240  # Max chars of left/right file context
    filename_chars_limit: int = 1024
    context_preview_len: int = 20  # Line preview length for left context
    supplemental_context_timeout: float = 0.1  # Seconds
    allow_code_with_reference: bool = True


@dataclass
class TransformConfig:
    """Transformation job configuration."""

    skip_tests_build_command: str = "clean test-compile"
    run_tests_build_command: str = "clean install"


@dataclass
class Config:
    """Root configuration object.

    Aggregates all configuration sections. All fields use default factories
    to ensure partial configs work correctly with deep merging.
    """

    logging: LoggingConfig = field(default_factory=LoggingConfig)
    completion: CompletionConfig = field(default_factory=CompletionConfig)
    transform: TransformConfig = field(default_factory=TransformConfig)

    # Extension point for future config sections
    extra: dict[str, Any] = field(default_factory=dict)
