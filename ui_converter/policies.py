"""Per-kind instantiation policies.

Every policy takes the walker, the source element, the scene parent and the
parent's converted size, attaches the node(s) it builds and returns a
:class:`BranchResult`. Policies never recurse into the source children of a
control; container-like kinds hand their content back to the walker.
"""
from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING, Callable, Dict, Optional, Tuple

from ui_converter.geometry import ResolvedGeometry, Size2, resolve_geometry
from ui_converter.report import (
    FOLD_REGION_FIRST,
    OPTIONAL_TEMPLATE,
    SCROLL_DIRECTION,
    TOGGLE_STATE,
    BranchResult,
    MissingTemplateError,
    Notice,
    StructuralConversionError,
)
from ui_converter.scene_node import SceneNode, absolute_scale, accumulated_scale, reparent_children
from ui_converter.source_tree import ElementKind, SourceElement, coerce_bool
from ui_converter.templates import (
    BACKPLATE,
    BUTTON,
    CONTAINER,
    LABEL,
    SCROLL_VIEW,
    SLIDER,
    SLIDER_INT,
    TEXT_INPUT,
    TemplateSpec,
)
from ui_converter.text_style import appearance_for, control_font_size, text_block_font_size
from ui_runtime.expand_controller import ExpandController
from ui_runtime.value_synchronizer import InputFieldModel, SliderModel, SliderValueSynchronizer, format_number

if TYPE_CHECKING:
    from ui_converter.tree_walker import TreeWalker

LOGGER = logging.getLogger("SpatialUIConverter.Policies")

# Authored text rect of the label template: 500 units wide for 25cm.
LABEL_TEXT_RECT_WIDTH = 500.0
# Authored rect of the input field template (160x30 for 8x1.5cm) and its text-area margins.
INPUT_RECT = (160.0, 30.0)
INPUT_SIDE_INSET = 10.0
INPUT_BOTTOM_MARGIN = 9.0
INPUT_TOP_MARGIN = 8.0

CONTROL_DEPTH = -1.0
BACKED_CONTROL_DEPTH = -0.5
SUB_LABEL_DEPTH = -0.01
INPUT_CANVAS_DEPTH = -0.1
# Grid placed this far (m) to the right of its collapsible header.
GRID_OFFSET = 0.3
CM_PER_M = 100.0

Policy = Callable[["TreeWalker", SourceElement, SceneNode, Size2], BranchResult]


def _usable(element: Optional[SourceElement]) -> bool:
    return element is not None and element.style.visible and not element.rect.is_empty()


def _source_frame(element: SourceElement) -> Size2:
    """Source size the element is measured against.

    Collapsed content areas report no size; their children then fill the frame.
    """

    parent_size = element.parent_size
    if parent_size[0] > 0.0 and parent_size[1] > 0.0:
        return parent_size
    LOGGER.debug("Parent of %r has no layout size; measuring it against itself", element.display_name())
    return element.size


def resolve(element: SourceElement, native_size: Size2, parent_size: Size2) -> ResolvedGeometry:
    return resolve_geometry(element.rect, _source_frame(element), native_size, parent_size)


def place(node: SceneNode, element: SourceElement, native_size: Size2, parent_size: Size2) -> ResolvedGeometry:
    """Resolve ``element`` and apply planar scale and position to ``node`` (depth untouched)."""

    geometry = resolve(element, native_size, parent_size)
    node.transform.set_planar_scale(*geometry.local_scale)
    node.transform.set_planar_position(*geometry.local_position)
    node.content["size"] = list(geometry.target_size)
    return geometry


def _cancel_inherited_scale(node: SceneNode) -> None:
    inherited_x, inherited_y = accumulated_scale(node)
    node.transform.scale = (1.0 / inherited_x, 1.0 / inherited_y, 1.0)
    node.cancels_inherited_scale = True


def _is_grid_item(node: SceneNode) -> bool:
    """True for nodes the collapsible grid resets to unit scale once staged content moves in."""

    parent = node.parent
    if parent is None:
        return False
    if parent.kind == "grid":
        return True
    return parent.kind == "staging" and parent.parent is not None and parent.parent.kind == "grid"


def _is_pressable(node: SceneNode) -> bool:
    return node.find("IconAndText") is not None or node.find("SeeItSayItLabel") is not None


def _place_grid(grid: SceneNode) -> None:
    header_stretch_x = absolute_scale(grid.parent)[0]
    grid.transform.set_planar_position(GRID_OFFSET / header_stretch_x, 0.0)


def _refresh_scale_corrections(grid: SceneNode) -> None:
    """Recompute corrections below the grid items after their scale was reset."""

    for node in grid.walk():
        if node is grid or _is_grid_item(node):
            continue
        if node.cancels_inherited_scale:
            _cancel_inherited_scale(node)
        elif node.kind == "grid":
            _place_grid(node)
        elif _is_pressable(node):
            square_icon_cluster(node)


def _require(walker: "TreeWalker", key: str) -> TemplateSpec:
    spec = walker.library.lookup(key)
    if spec is None:
        raise MissingTemplateError([key])
    return spec


def _backing_visible(walker: "TreeWalker", node: SceneNode) -> None:
    if not walker.settings.show_control_backing:
        node.content["backing_visible"] = False


def _slider_value(element: SourceElement) -> float:
    try:
        number = float(element.value)
    except (TypeError, ValueError):
        return element.low
    if not math.isfinite(number):
        return element.low
    return number


def _normalized(number: float, low: float, high: float) -> float:
    span = high - low
    if span == 0:
        return 0.0
    return (number - low) / span


# --- text -----------------------------------------------------------------


def build_label(
    walker: "TreeWalker",
    element: SourceElement,
    parent_node: SceneNode,
    parent_size: Size2,
    *,
    default_name: str = "Label",
) -> SceneNode:
    """Free-standing text block; its text does not inherit node scale."""

    spec = _require(walker, LABEL)
    node = spec.instantiate(element.display_name(default_name))
    parent_node.add_child(node)
    _cancel_inherited_scale(node)
    geometry = resolve(element, spec.native_size, parent_size)
    node.transform.set_planar_position(*geometry.local_position)
    node.content["size"] = list(geometry.target_size)

    rect_width = LABEL_TEXT_RECT_WIDTH * (geometry.target_size[0] / spec.native_size[0])
    source_w, source_h = element.size
    rect_height = rect_width * (source_h / source_w) if source_w else 0.0
    text_node = node.find("Text")
    if text_node is None:
        text_node = node.add_child(SceneNode(name="Text", kind="text-display"))
    font_size = text_block_font_size(element.style.font_size, walker.footprint[1])
    text_node.content["text"] = appearance_for(element, font_size)
    text_node.content["rect"] = [rect_width, rect_height]
    return node


def convert_label(walker: "TreeWalker", element: SourceElement, parent_node: SceneNode, parent_size: Size2) -> BranchResult:
    node = build_label(walker, element, parent_node, parent_size)
    return BranchResult.of(node, ElementKind.LABEL)


def build_input_field(
    walker: "TreeWalker",
    element: SourceElement,
    parent_node: SceneNode,
    parent_size: Size2,
    *,
    text: str,
    default_name: str = "InputField",
    kind: str = "text-input",
) -> Tuple[SceneNode, InputFieldModel]:
    """Canvas (unscaled) holding the input field template with recomputed text-area insets."""

    label_spec = _require(walker, LABEL)
    field_spec = _require(walker, TEXT_INPUT)
    canvas = SceneNode(name=element.display_name(default_name), kind=kind, template=label_spec.asset)
    parent_node.add_child(canvas)
    canvas.transform.set_depth(INPUT_CANVAS_DEPTH)
    _cancel_inherited_scale(canvas)

    field = field_spec.instantiate(field_spec.asset)
    canvas.add_child(field)
    geometry = resolve(element, field_spec.native_size, parent_size)
    canvas.content["size"] = list(geometry.target_size)

    width = INPUT_RECT[0] * (geometry.target_size[0] / field_spec.native_size[0])
    height = INPUT_RECT[1] * (geometry.target_size[1] / field_spec.native_size[1])
    side = INPUT_SIDE_INSET * (width / INPUT_RECT[0])
    insets = {
        "left": side,
        "right": side,
        "bottom": max(0.0, height / 2.0 - INPUT_BOTTOM_MARGIN),
        "top": max(0.0, height / 2.0 - INPUT_TOP_MARGIN),
    }
    model = InputFieldModel(text)
    field.content["rect"] = [width, height]
    field.content["point_size"] = element.style.font_size
    field.content["input"] = model
    text_area = field.find("Text Area")
    if text_area is None:
        text_area = field.add_child(SceneNode(name="Text Area", kind="text-area"))
    text_area.content["insets"] = insets

    canvas.transform.set_planar_position(*geometry.local_position)
    return canvas, model


# --- buttons and toggles ---------------------------------------------------


def square_icon_cluster(node: SceneNode) -> Tuple[float, float]:
    """Counter-scale the icon cluster so it renders square; factors stay <= 1."""

    stretch_x, stretch_y = absolute_scale(node)
    if stretch_x > stretch_y:
        factor = (stretch_y / stretch_x, 1.0)
    else:
        factor = (1.0, stretch_x / stretch_y)
    for part_name in ("IconAndText", "SeeItSayItLabel"):
        part = node.find(part_name)
        if part is not None:
            part.transform.set_planar_scale(*factor)
    return factor


def _build_pressable(
    walker: "TreeWalker",
    spec: TemplateSpec,
    element: SourceElement,
    parent_node: SceneNode,
    parent_size: Size2,
    *,
    text_source: SourceElement,
    default_name: str,
    always_square: bool = False,
) -> SceneNode:
    node = spec.instantiate(element.display_name(default_name))
    parent_node.add_child(node)
    node.transform.set_depth(CONTROL_DEPTH)
    place(node, element, spec.native_size, parent_size)

    cluster = node.find("IconAndText")
    if cluster is not None:
        cluster.content["text"] = appearance_for(text_source, control_font_size(text_source.style.font_size))
    if always_square or not _is_grid_item(node):
        square_icon_cluster(node)
    voice_hint = node.find("SeeItSayItLabel")
    if voice_hint is not None:
        voice_hint.visible = False
    backplate = node.find("BackPlate")
    if backplate is not None and not walker.settings.show_control_backing:
        backplate.visible = False
    return node


def convert_button(walker: "TreeWalker", element: SourceElement, parent_node: SceneNode, parent_size: Size2) -> BranchResult:
    node = _build_pressable(
        walker, _require(walker, BUTTON), element, parent_node, parent_size, text_source=element, default_name="Button"
    )
    return BranchResult.of(node, ElementKind.BUTTON)


def convert_toggle(walker: "TreeWalker", element: SourceElement, parent_node: SceneNode, parent_size: Size2) -> BranchResult:
    label = element.part("label") or element
    node = _build_pressable(
        walker, walker.toggle_spec, element, parent_node, parent_size, text_source=label, default_name="Toggle"
    )
    node.content["toggle_style"] = walker.settings.toggle_style.value
    result = BranchResult.of(node, ElementKind.TOGGLE)
    if coerce_bool(element.value, False):
        result.notices.append(Notice(category=TOGGLE_STATE, message="", subject=node.name))
    return result


# --- sliders ----------------------------------------------------------------


def _slider_handle_spec(walker: "TreeWalker", stepped: bool) -> Tuple[TemplateSpec, Optional[Notice]]:
    if stepped:
        spec = walker.library.lookup(SLIDER_INT)
        if spec is not None:
            return spec, None
        notice = Notice(
            category=OPTIONAL_TEMPLATE,
            message=f"Template '{SLIDER_INT}' is not available; stepped sliders were converted as continuous sliders.",
        )
        return _require(walker, SLIDER), notice
    return _require(walker, SLIDER), None


def convert_slider(walker: "TreeWalker", element: SourceElement, parent_node: SceneNode, parent_size: Size2) -> BranchResult:
    stepped = element.kind is ElementKind.SLIDER_INT
    backing_spec = _require(walker, BACKPLATE)
    node = backing_spec.instantiate(element.display_name("SliderInt" if stepped else "Slider"))
    node.kind = element.kind.value
    node.content["collider"] = False
    parent_node.add_child(node)
    node.transform.set_depth(BACKED_CONTROL_DEPTH)
    geometry = place(node, element, backing_spec.native_size, parent_size)
    _backing_visible(walker, node)

    result = BranchResult.of(node, element.kind)
    label = element.part("label")
    if _usable(label):
        label_node = build_label(walker, label, node, geometry.target_size)
        label_node.transform.set_depth(SUB_LABEL_DEPTH)
        result.kinds_seen.add(ElementKind.LABEL)

    value_container = element.part("input")
    if not _usable(value_container):
        LOGGER.debug("Slider %r has no value container; handle skipped", node.name)
        return result

    container = SceneNode(name="SliderContainer", kind="container")
    node.add_child(container)
    container_geometry = place(container, value_container, _require(walker, CONTAINER).native_size, geometry.target_size)

    handle_spec, notice = _slider_handle_spec(walker, stepped)
    if notice is not None:
        result.notices.append(notice)
    handle = handle_spec.instantiate(handle_spec.asset)
    container.add_child(handle)
    handle.transform.set_depth(-1.0 / container.transform.scale[2])
    drag_area = value_container.part("drag_container")
    if _usable(drag_area):
        place(handle, drag_area, handle_spec.native_size, container_geometry.target_size)
        container_x, container_y = container.transform.scale[:2]
        handle_x, handle_y, handle_z = handle.transform.scale
        handle.transform.scale = (handle_x, handle_y * container_x / container_y, handle_z)

    slider_model = SliderModel(
        _normalized(_slider_value(element), element.low, element.high),
        step_divisions=int(round(element.high - element.low)) if stepped else None,
    )
    handle.content["slider"] = slider_model

    value_field = value_container.part("value_field")
    if element.show_input_field and _usable(value_field):
        if walker.library.lookup(TEXT_INPUT) is None:
            result.notices.append(_missing_text_input_notice())
            return result
        canvas, field_model = build_input_field(
            walker,
            value_field,
            container,
            container_geometry.target_size,
            text=format_number(_slider_value(element), stepped),
            kind="value-field",
        )
        canvas.name = "ValueField"
        synchronizer = SliderValueSynchronizer(slider_model, field_model, element.low, element.high, stepped)
        container.behaviors.append(synchronizer)
        result.kinds_seen.add(ElementKind.TEXT_FIELD)
    return result


# --- text fields --------------------------------------------------------------


def _missing_text_input_notice() -> Notice:
    return Notice(
        category=OPTIONAL_TEMPLATE,
        message=f"Template '{TEXT_INPUT}' is not available; text input fields were converted as plain containers.",
    )


def convert_text_field(walker: "TreeWalker", element: SourceElement, parent_node: SceneNode, parent_size: Size2) -> BranchResult:
    if walker.library.lookup(TEXT_INPUT) is None:
        result = convert_container(walker, element, parent_node, parent_size)
        result.notices.append(_missing_text_input_notice())
        return result

    backing_spec = _require(walker, BACKPLATE)
    node = backing_spec.instantiate(element.display_name("TextField"))
    node.kind = ElementKind.TEXT_FIELD.value
    node.content["collider"] = False
    parent_node.add_child(node)
    node.transform.set_depth(BACKED_CONTROL_DEPTH)
    geometry = place(node, element, backing_spec.native_size, parent_size)
    _backing_visible(walker, node)

    result = BranchResult.of(node, ElementKind.TEXT_FIELD)
    label = element.part("label")
    if _usable(label):
        label_node = build_label(walker, label, node, geometry.target_size)
        label_node.transform.set_depth(SUB_LABEL_DEPTH)
        result.kinds_seen.add(ElementKind.LABEL)
    text_input = element.part("text_input")
    if _usable(text_input):
        build_input_field(walker, text_input, node, geometry.target_size, text=element.text)
    return result


# --- containers -------------------------------------------------------------------


def _convert_staged(
    walker: "TreeWalker",
    content: SourceElement,
    container: SceneNode,
    content_size: Size2,
) -> BranchResult:
    """Convert ``content``'s children in a unit-scaled frame and move them into ``container``."""

    staging = SceneNode(name="Staging", kind="staging")
    container.add_child(staging)
    branch = walker.convert_children(content, staging, content_size)
    reparent_children(staging, container, depth=0.0)
    staging.detach()
    return branch


def convert_scroll_view(walker: "TreeWalker", element: SourceElement, parent_node: SceneNode, parent_size: Size2) -> BranchResult:
    spec = _require(walker, SCROLL_VIEW)
    node = spec.instantiate(element.display_name("ScrollView"))
    parent_node.add_child(node)
    geometry = resolve(element, spec.native_size, parent_size)
    cell_w = geometry.target_size[0] / CM_PER_M
    cell_h = geometry.target_size[1] / CM_PER_M
    center_x, center_y = geometry.local_position
    node.transform.set_planar_position(center_x - cell_w / 2.0, center_y + cell_h / 2.0)
    node.content.update(
        {
            "size": list(geometry.target_size),
            "direction": walker.settings.scroll_direction,
            "tiers_per_page": 1,
            "cell_size": [cell_w, cell_h],
        }
    )

    container = node.find("Container")
    if container is None:
        container = node.add_child(SceneNode(name="Container", kind="scroll-container"))
    container.transform.set_planar_position(cell_w / 2.0, -cell_h / 2.0)

    result = BranchResult.of(node, ElementKind.SCROLL_VIEW)
    result.notices.append(
        Notice(
            category=SCROLL_DIRECTION,
            message=(
                "Scroll views scroll in both directions in the source; converted scroll views only scroll "
                f"{walker.settings.scroll_direction}ly."
            ),
        )
    )
    branch = _convert_staged(walker, element.content_area(), container, geometry.target_size)
    return result.merge(branch, keep_nodes=False)


def convert_foldout(walker: "TreeWalker", element: SourceElement, parent_node: SceneNode, parent_size: Size2) -> BranchResult:
    if element.expanded:
        raise StructuralConversionError(FOLD_REGION_FIRST)

    header_source = element.part("header")
    label = None
    if header_source is not None:
        label = header_source.part("label") or header_source
    header = _build_pressable(
        walker,
        _require(walker, BUTTON),
        element,
        parent_node,
        parent_size,
        text_source=label or element,
        default_name="Foldout",
        always_square=True,
    )

    cell_size = walker.settings.collapsible_cell_size
    grid = SceneNode(name="GridObjectCollection", kind="grid")
    header.add_child(grid)
    _place_grid(grid)
    grid.content.update(
        {
            "layout": "vertical",
            "cell_size": [cell_size[0] / CM_PER_M, cell_size[1] / CM_PER_M],
        }
    )

    branch = _convert_staged(walker, element.content_area(), grid, cell_size)
    for child in grid.children:
        child.transform.scale = (1.0, 1.0, 1.0)
        child.transform.set_depth(0.0)
    _refresh_scale_corrections(grid)
    grid.visible = walker.settings.show_collapsible_content

    controller = ExpandController(grid)
    header.behaviors.append(controller)

    result = BranchResult.of(header, ElementKind.FOLDOUT)
    return result.merge(branch, keep_nodes=False)


def convert_container(walker: "TreeWalker", element: SourceElement, parent_node: SceneNode, parent_size: Size2) -> BranchResult:
    spec = _require(walker, CONTAINER)
    node = spec.instantiate(element.display_name("VisualElement"))
    parent_node.add_child(node)
    geometry = place(node, element, spec.native_size, parent_size)
    node.transform.scale = (node.transform.scale[0], node.transform.scale[1], 1.0)
    node.content["background"] = element.style.has_background
    result = BranchResult(nodes=[node], kinds_seen={ElementKind.CONTAINER})
    return result.merge(walker.convert_children(element, node, geometry.target_size), keep_nodes=False)


POLICIES: Dict[ElementKind, Policy] = {
    ElementKind.LABEL: convert_label,
    ElementKind.BUTTON: convert_button,
    ElementKind.TOGGLE: convert_toggle,
    ElementKind.SLIDER: convert_slider,
    ElementKind.SLIDER_INT: convert_slider,
    ElementKind.TEXT_FIELD: convert_text_field,
    ElementKind.SCROLL_VIEW: convert_scroll_view,
    ElementKind.FOLDOUT: convert_foldout,
    ElementKind.CONTAINER: convert_container,
}


def policy_for(kind: ElementKind) -> Policy:
    return POLICIES.get(kind, convert_container)
