"""
Mailforge Kernel - Shared Types

Data classes used across the index, validator, transcoder and reducer.
These are the contracts that bind the kernel together.

Document model:
- Template -> Section[] -> Column[] -> Block[]
- Block properties are plain dicts keyed by camelCase names, so a template
  round-trips through JSON without translation
- to_dict()/from_dict() produce and accept the interchange shape
  ({"sections", "globalStyles", "headMetadata"})

from_dict() trusts its input. Anything from storage or import must go
through validate.sanitize_template() first.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from mailforge.kernel.registry import BlockRegistry

# ---------------------------------------------------------------------------
# Block type registry (built-ins)
# ---------------------------------------------------------------------------

BUILT_IN_BLOCK_TYPES: frozenset[str] = frozenset(
    {
        "text",
        "button",
        "image",
        "divider",
        "spacer",
        "social",
        "html",
        "video",
        "heading",
        "countdown",
        "menu",
        "hero",
    }
)

ACTIVE_TABS: frozenset[str] = frozenset({"visual", "source", "preview"})


# ---------------------------------------------------------------------------
# Document model
# ---------------------------------------------------------------------------


@dataclass
class Block:
    """The atomic content unit. `properties` shape is determined by `type`."""

    id: str
    type: str
    properties: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "type": self.type, "properties": self.properties}

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Block:
        return cls(id=d["id"], type=d["type"], properties=dict(d.get("properties", {})))


@dataclass
class Column:
    id: str
    width: str = "100%"
    blocks: list[Block] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "width": self.width,
            "blocks": [b.to_dict() for b in self.blocks],
        }

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Column:
        return cls(
            id=d["id"],
            width=d.get("width", "100%"),
            blocks=[Block.from_dict(b) for b in d.get("blocks", [])],
        )


@dataclass
class Section:
    """
    A horizontal band of the email.

    properties: backgroundColor, padding, borderRadius, fullWidth and the
    optional backgroundImage / backgroundSize / backgroundRepeat.
    """

    id: str
    columns: list[Column] = field(default_factory=list)
    properties: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "columns": [c.to_dict() for c in self.columns],
            "properties": self.properties,
        }

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Section:
        return cls(
            id=d["id"],
            columns=[Column.from_dict(c) for c in d.get("columns", [])],
            properties=dict(d.get("properties", {})),
        )


@dataclass
class GlobalStyles:
    background_color: str = "#f4f4f4"
    width: int = 600  # pixels
    font_family: str = "Arial, sans-serif"

    def to_dict(self) -> dict[str, Any]:
        return {
            "backgroundColor": self.background_color,
            "width": self.width,
            "fontFamily": self.font_family,
        }

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> GlobalStyles:
        return cls(
            background_color=d.get("backgroundColor", "#f4f4f4"),
            width=d.get("width", 600),
            font_family=d.get("fontFamily", "Arial, sans-serif"),
        )


@dataclass
class HeadMetadata:
    title: str = ""
    preview_text: str = ""
    head_styles: list[str] = field(default_factory=list)  # raw CSS, in order

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "previewText": self.preview_text,
            "headStyles": list(self.head_styles),
        }

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> HeadMetadata:
        return cls(
            title=d.get("title", ""),
            preview_text=d.get("previewText", ""),
            head_styles=list(d.get("headStyles", [])),
        )


@dataclass
class Template:
    """The root document value. Section order is render order."""

    sections: list[Section] = field(default_factory=list)
    global_styles: GlobalStyles = field(default_factory=GlobalStyles)
    head_metadata: HeadMetadata = field(default_factory=HeadMetadata)

    def to_dict(self) -> dict[str, Any]:
        return {
            "sections": [s.to_dict() for s in self.sections],
            "globalStyles": self.global_styles.to_dict(),
            "headMetadata": self.head_metadata.to_dict(),
        }

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Template:
        return cls(
            sections=[Section.from_dict(s) for s in d.get("sections", [])],
            global_styles=GlobalStyles.from_dict(d.get("globalStyles") or {}),
            head_metadata=HeadMetadata.from_dict(d.get("headMetadata") or {}),
        )


# ---------------------------------------------------------------------------
# Editor state
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class BlockLocation:
    """Where a block lives. Values of the structural index."""

    section_id: str
    column_id: str


@dataclass(frozen=True)
class Selection:
    section_id: str | None = None
    column_id: str | None = None
    block_id: str | None = None

    @property
    def is_empty(self) -> bool:
        return self.section_id is None and self.column_id is None and self.block_id is None


EMPTY_SELECTION = Selection()


@dataclass(frozen=True)
class EditorState:
    """
    Reducer state. Never mutated; every reduction returns a new instance
    or the same instance when the action had no effect.

    history[history_index] is template once pending property edits have
    been committed with PUSH_HISTORY.
    """

    template: Template
    selection: Selection = EMPTY_SELECTION
    active_tab: str = "visual"
    history: tuple[Template, ...] = ()
    history_index: int = 0
    is_dirty: bool = False
    block_index: dict[str, BlockLocation] = field(default_factory=dict)
    max_history: int = 50
    # Block types SET_TEMPLATE keeps; None means the default registry
    registry: BlockRegistry | None = field(default=None, compare=False, repr=False)

    @property
    def can_undo(self) -> bool:
        return self.history_index > 0

    @property
    def can_redo(self) -> bool:
        return self.history_index < len(self.history) - 1


@dataclass
class Action:
    """
    One edit request for the reducer.
    The reducer reads only `type` and `payload`.
    """

    type: str
    payload: Any = None


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


@dataclass
class ValidationResult:
    valid: bool
    errors: list[str] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Variables
# ---------------------------------------------------------------------------


@dataclass
class Variable:
    """A merge field offered to the rich-text editor as {{ key }}."""

    key: str
    sample: str | None = None
    label: str | None = None
    group: str | None = None
    icon: str | None = None
