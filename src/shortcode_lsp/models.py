"""Data models for shortcode-lsp."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import ClassVar, Union

from .constants import DEFAULT_VALUE_PATH


@dataclass(frozen=True)
class EnumSource:
    """Fixed list of values, optionally with a default."""

    type: ClassVar[str] = "enum"
    values: tuple[str, ...] = ()
    default: str | None = None


@dataclass(frozen=True)
class BooleanSource:
    type: ClassVar[str] = "boolean"
    default: bool | None = None


@dataclass(frozen=True)
class FreeformSource:
    type: ClassVar[str] = "freeform"
    placeholder: str = ""


@dataclass(frozen=True)
class FileSource:
    """Paths relative to the document, filtered by extension."""

    type: ClassVar[str] = "file"
    extensions: tuple[str, ...] = ()


@dataclass(frozen=True)
class ColorSource:
    type: ClassVar[str] = "color"


@dataclass(frozen=True)
class FileDataSource:
    """Array inside a bundled JSON asset, addressed by a dot path."""

    type: ClassVar[str] = "file-data"
    source: str = ""
    path: str = ""
    label_path: str | None = None
    detail_path: str | None = None


@dataclass(frozen=True)
class FrontmatterSource:
    """Field of each list item under a section of the document frontmatter."""

    type: ClassVar[str] = "frontmatter"
    key: str = ""
    value_path: str = DEFAULT_VALUE_PATH


@dataclass(frozen=True)
class WorkspaceFileSource:
    """Same as FrontmatterSource, read from a file found between document and workspace root."""

    type: ClassVar[str] = "workspace-file"
    filename: str = ""
    path: str = ""
    value_path: str = DEFAULT_VALUE_PATH


@dataclass(frozen=True)
class NoneSource:
    type: ClassVar[str] = "none"


ValueSource = Union[
    EnumSource,
    BooleanSource,
    FreeformSource,
    FileSource,
    ColorSource,
    FileDataSource,
    FrontmatterSource,
    WorkspaceFileSource,
    NoneSource,
]


@dataclass(frozen=True)
class Argument:
    """Positional argument of a directive."""

    name: str
    source: ValueSource
    required: bool = False


@dataclass(frozen=True)
class Attribute:
    """Named ``key=value`` attribute of a directive."""

    name: str
    source: ValueSource
    description: str = ""
    category: str | None = None
    quoted: bool = False

    @property
    def placeholder(self) -> str:
        if isinstance(self.source, FreeformSource):
            return self.source.placeholder
        return ""


@dataclass(frozen=True)
class DirectiveSpec:
    """Declarative grammar of one directive."""

    name: str
    arguments: tuple[Argument, ...] = ()
    attributes: tuple[Attribute, ...] = ()
    filter: str | None = None
    span_classes: tuple[str, ...] = ()

    @property
    def is_span(self) -> bool:
        return bool(self.span_classes)

    @property
    def primary(self) -> Argument | None:
        return self.arguments[0] if self.arguments else None

    def get_attribute(self, name: str) -> Attribute | None:
        """Get attribute definition by name."""
        for attribute in self.attributes:
            if attribute.name == name:
                return attribute
        return None

    def get_attribute_names(self) -> list[str]:
        return [attribute.name for attribute in self.attributes]


class DirectiveKind(str, Enum):
    SHORTCODE = "shortcode"
    SPAN = "span"


class CompletionKind(str, Enum):
    PRIMARY = "primary"
    ATTRIBUTE_NAME = "attribute-name"
    ATTRIBUTE_VALUE = "attribute-value"


@dataclass(frozen=True)
class RawContext:
    """A located directive instance on a line.

    ``content_start`` points at the first character after the opening marker
    (the directive name for shortcodes, the brace for spans).
    """

    kind: DirectiveKind
    full_content: str
    content_start: int
    content_end: int
    cursor: int
    has_space_after_name: bool
    has_space_before_end: bool


@dataclass(frozen=True)
class ParsedContext:
    """What is being completed at the cursor."""

    full_content: str
    content_start: int
    completion_kind: CompletionKind
    typed_text: str
    token_start: int
    cursor: int
    has_space_before_end: bool
    needs_leading_space: bool
    attribute_name: str | None = None
    directive_kind: DirectiveKind = DirectiveKind.SHORTCODE
    quote: str = ""
    quote_closed: bool = False

    @property
    def replacement_range(self) -> tuple[int, int]:
        return (self.token_start, self.cursor)


class CandidateKind(str, Enum):
    VALUE = "value"
    PROPERTY = "property"
    COLOR = "color"
    FILE = "file"
    FOLDER = "folder"
    CONSTANT = "constant"
    REFERENCE = "reference"


@dataclass(frozen=True)
class Candidate:
    """One ranked completion suggestion."""

    label: str
    insert_text: str
    sort_key: str
    replacement_range: tuple[int, int]
    kind: CandidateKind = CandidateKind.VALUE
    detail: str | None = None
    documentation: str | None = None
    is_snippet: bool = False
    request_followup: bool = False
    filter_text: str | None = None


@dataclass(frozen=True)
class BrandColor:
    name: str
    value: str


@dataclass(frozen=True)
class DirectoryEntry:
    name: str
    is_directory: bool


@dataclass(frozen=True)
class DocumentRef:
    """The document a completion request belongs to."""

    uri: str
    text: str = ""
    version: int = 0
    path: Path | None = None
    workspace_root: Path | None = None

    @property
    def directory(self) -> Path | None:
        return self.path.parent if self.path is not None else None
