"""
Structured error types for pagekit.

Every failure the library can raise is a ``PagekitError`` carrying a
category, a structured context (source path, line, field) and an optional
chained cause. The builder records these per page; the CLI turns them into
``Error (CATEGORY): message`` lines and a non-zero exit code.

Manifesto:
    - **Typed hierarchy:** One error type per failure domain
    - **Rich context:** Errors say which page and which line
    - **Error chaining:** yaml/jinja2/pydantic exceptions are kept as ``cause``

Architecture:
    ::

        ┌────────────────────────────────────────────────────────────┐
        │                       PagekitError                          │
        │            (category, context, cause)                       │
        ├────────────────────────────────────────────────────────────┤
        │  PageNotFoundError   FrontMatterError    MetadataError      │
        │  (SOURCE)            (PARSE)             (VALIDATION)       │
        │                                               │             │
        │                                       ReviewIntervalError   │
        │                                                             │
        │  TemplateRenderError ConfigError         OutputError        │
        │  (TEMPLATE)          (CONFIG)            (STORAGE)          │
        │                         │                                   │
        │              MissingConfig / InvalidConfig                  │
        └────────────────────────────────────────────────────────────┘

Examples:
    >>> err = FrontMatterError("front matter is not closed")
    >>> err.with_context(source_path="content/python.md", line=1).to_dict()["context"]
    {'source_path': 'content/python.md', 'line': 1}

Tags:
    error-handling, exception-hierarchy, error-context, pagekit
"""

from __future__ import annotations

from dataclasses import dataclass
from dataclasses import field as dataclass_field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Standard error categories used for reporting."""

    SOURCE = "SOURCE"             # Page file missing or unreadable
    PARSE = "PARSE"               # Front matter syntax
    VALIDATION = "VALIDATION"     # Metadata values
    TEMPLATE = "TEMPLATE"         # Placeholder / layout rendering
    CONFIG = "CONFIG"             # Config file and settings
    STORAGE = "STORAGE"           # Writing output
    INTERNAL = "INTERNAL"         # Bugs, unexpected state


@dataclass
class ErrorContext:
    """
    Structured metadata attached to an error.

    Only fields that were set are serialised by ``to_dict()``; anything that
    does not have a dedicated field goes into ``metadata``.

    Attributes:
        source_path: Page the error relates to
        line: 1-based line number inside the page source
        field: Front-matter key or config key involved
        metadata: Free-form extras
    """

    source_path: str | None = None
    line: int | None = None
    field: str | None = None
    metadata: dict[str, Any] = dataclass_field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {}
        for name in ("source_path", "line", "field"):
            value = getattr(self, name)
            if value is not None:
                result[name] = value
        result.update(self.metadata)
        return result


class PagekitError(Exception):
    """
    Base class for all pagekit errors.

    Subclasses set ``default_category``; callers may override it per
    instance. ``cause`` is chained onto ``__cause__`` so tracebacks keep the
    original exception.
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> PagekitError:
        """
        Add context to this error (fluent API).

        Usage:
            raise FrontMatterError("bad yaml").with_context(
                source_path="content/python.md", line=3
            )
        """
        for key, value in kwargs.items():
            if key != "metadata" and hasattr(self.context, key):
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result: dict[str, Any] = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __str__(self) -> str:
        location = self.context.source_path
        if location and self.context.line is not None:
            location = f"{location}:{self.context.line}"
        if location:
            return f"{location}: {self.message}"
        return self.message

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# SOURCE / PARSE ERRORS
# =============================================================================


class PageNotFoundError(PagekitError):
    """Page source does not exist or cannot be read."""

    default_category = ErrorCategory.SOURCE


class FrontMatterError(PagekitError):
    """Front-matter block is malformed."""

    default_category = ErrorCategory.PARSE


# =============================================================================
# VALIDATION ERRORS
# =============================================================================


class MetadataError(PagekitError):
    """
    A front-matter value failed validation.

    Never fixed by retrying: the page source must be edited.
    """

    default_category = ErrorCategory.VALIDATION

    def __init__(
        self,
        message: str,
        *,
        field: str | None = None,
        value: Any = None,
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        self.field = field
        self.value = value
        if field is not None and self.context.field is None:
            self.context.field = field

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        if self.field:
            result["field"] = self.field
        if self.value is not None:
            result["value"] = repr(self.value)
        return result


class ReviewIntervalError(MetadataError):
    """``review_in`` is not a recognised interval."""

    def __init__(self, value: Any, message: str | None = None, **kwargs: Any):
        super().__init__(
            message or f"Unrecognised review interval: {value!r}",
            field="review_in",
            value=value,
            **kwargs,
        )


# =============================================================================
# TEMPLATE ERRORS
# =============================================================================


class TemplateRenderError(PagekitError):
    """Placeholder substitution or layout rendering failed."""

    default_category = ErrorCategory.TEMPLATE


# =============================================================================
# CONFIGURATION ERRORS
# =============================================================================


class ConfigError(PagekitError):
    """Configuration error."""

    default_category = ErrorCategory.CONFIG


class MissingConfigError(ConfigError):
    """Required configuration is missing."""

    def __init__(self, key: str, message: str | None = None):
        self.key = key
        super().__init__(message or f"Missing required configuration: {key}")


class InvalidConfigError(ConfigError):
    """Configuration value is invalid."""

    def __init__(self, key: str, value: Any, message: str | None = None):
        self.key = key
        self.value = value
        super().__init__(message or f"Invalid configuration for {key}: {value!r}")


# =============================================================================
# STORAGE ERRORS
# =============================================================================


class OutputError(PagekitError):
    """Rendered page could not be written."""

    default_category = ErrorCategory.STORAGE


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "PagekitError",
    "PageNotFoundError",
    "FrontMatterError",
    "MetadataError",
    "ReviewIntervalError",
    "TemplateRenderError",
    "ConfigError",
    "MissingConfigError",
    "InvalidConfigError",
    "OutputError",
]
