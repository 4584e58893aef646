"""Conversion outcome types: errors, per-branch accumulators and the final report."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, Iterable, List, Optional, Tuple

from ui_converter.scene_node import SceneNode
from ui_converter.source_tree import ElementKind

NOTHING_TO_CONVERT = "Nothing to convert. Make sure a source UI tree is set before converting."
FOLD_REGION_FIRST = "Please fold the Foldout, then try again."

ADVISE_LABEL_FONT = "You might need to adjust the font size of labels."
ADVISE_SLIDER_DEPTH = "You might need to set the Z value of the scale of the slider for a better appearance."
ADVISE_INPUT_FIELD = "You might need to adjust the font size and the rect of the text input field."
ADVISE_SCROLL_SIZE = (
    "You might adjust the size of the scroll view so that it can always fully display at least one object, "
    "because objects cannot be clicked if they are not fully displayed in the scrolling object collection."
)
ADVISE_COLLAPSIBLE_CELLS = "You might adjust the objects' size in the object collections."
ADVISE_VOICE_HINTS = "SeeItSayItLabels are deactivated because their scale will change at runtime."
ADVISE_DEPTH = "You might need to adjust Z values of objects' position manually for a better appearance."

# Kind-keyed advisories, in report order. The depth advisory is always appended last.
ADVISORIES: Tuple[Tuple[FrozenSet[ElementKind], str], ...] = (
    (frozenset({ElementKind.BUTTON, ElementKind.TOGGLE, ElementKind.FOLDOUT}), ADVISE_VOICE_HINTS),
    (frozenset({ElementKind.LABEL}), ADVISE_LABEL_FONT),
    (frozenset({ElementKind.SLIDER, ElementKind.SLIDER_INT}), ADVISE_SLIDER_DEPTH),
    (frozenset({ElementKind.TEXT_FIELD}), ADVISE_INPUT_FIELD),
    (frozenset({ElementKind.SCROLL_VIEW}), ADVISE_SCROLL_SIZE),
    (frozenset({ElementKind.FOLDOUT}), ADVISE_COLLAPSIBLE_CELLS),
)


class ConversionError(ValueError):
    """Fatal condition that aborts a conversion run."""


class MissingTemplateError(ConversionError):
    def __init__(self, keys: Iterable[str]) -> None:
        self.keys: Tuple[str, ...] = tuple(keys)
        super().__init__("; ".join(missing_template_message(key) for key in self.keys))

    @property
    def messages(self) -> List[str]:
        return [missing_template_message(key) for key in self.keys]


class NothingToConvertError(ConversionError):
    def __init__(self) -> None:
        super().__init__(NOTHING_TO_CONVERT)


class StructuralConversionError(ConversionError):
    """A source region cannot be reproduced in its current state."""


def missing_template_message(key: str) -> str:
    return f"Template '{key}' is not available in the template library."


class ConversionStatus(Enum):
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass
class Notice:
    """A non-fatal warning raised while converting one branch.

    ``category`` groups notices that are reported once per run.
    """

    category: str
    message: str
    subject: Optional[str] = None


@dataclass
class BranchResult:
    """Value returned by every policy and merged by its caller."""

    nodes: List[SceneNode] = field(default_factory=list)
    notices: List[Notice] = field(default_factory=list)
    kinds_seen: set = field(default_factory=set)

    @classmethod
    def of(cls, node: SceneNode, kind: ElementKind, *notices: Notice) -> "BranchResult":
        return cls(nodes=[node], notices=list(notices), kinds_seen={kind})

    def merge(self, other: "BranchResult", *, keep_nodes: bool = True) -> "BranchResult":
        if keep_nodes:
            self.nodes.extend(other.nodes)
        self.notices.extend(other.notices)
        self.kinds_seen.update(other.kinds_seen)
        return self


TOGGLE_STATE = "toggle-state"
SCROLL_DIRECTION = "scroll-direction"
OPTIONAL_TEMPLATE = "optional-template"


def collapse_notices(notices: Iterable[Notice]) -> List[str]:
    """Fold notices into one message per category, preserving first-seen order.

    Toggle-state notices are aggregated into a single message naming every control.
    """

    messages: List[str] = []
    toggles: List[str] = []
    toggle_slot: Optional[int] = None
    seen = set()
    for notice in notices:
        if notice.category == TOGGLE_STATE:
            if toggle_slot is None:
                toggle_slot = len(messages)
                messages.append("")
            if notice.subject and notice.subject not in toggles:
                toggles.append(notice.subject)
            continue
        key = (notice.category, notice.message)
        if notice.category != OPTIONAL_TEMPLATE:
            key = (notice.category, "")
        if key in seen:
            continue
        seen.add(key)
        messages.append(notice.message)
    if toggle_slot is not None:
        names = ", ".join(toggles) or "unnamed toggle"
        messages[toggle_slot] = (
            f"Toggles switched on in the source ({names}) were converted in their off state; "
            "set their state manually."
        )
    return messages


def advisories_for(kinds_seen: Iterable[ElementKind]) -> List[str]:
    seen = set(kinds_seen)
    messages = [message for kinds, message in ADVISORIES if kinds & seen]
    messages.append(ADVISE_DEPTH)
    return messages


@dataclass
class ConversionReport:
    status: ConversionStatus
    messages: List[str] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.status is ConversionStatus.SUCCEEDED

    def lines(self) -> List[str]:
        heading = "Conversion Succeeded" if self.succeeded else "Conversion Failed"
        return [heading, *self.messages]

    @classmethod
    def failed(cls, messages: Iterable[str]) -> "ConversionReport":
        return cls(status=ConversionStatus.FAILED, messages=list(messages))

    @classmethod
    def succeeded_with(cls, branch: BranchResult) -> "ConversionReport":
        messages = collapse_notices(branch.notices)
        messages.extend(advisories_for(branch.kinds_seen))
        return cls(status=ConversionStatus.SUCCEEDED, messages=messages)


@dataclass
class ConversionResult:
    scene: Optional[SceneNode]
    report: ConversionReport

    @property
    def succeeded(self) -> bool:
        return self.report.succeeded
