"""Top-level entry point that turns a source UI tree into a scene tree and report."""
from __future__ import annotations

import logging
from typing import Optional, Tuple

from ui_converter.converter_config import ConverterSettings
from ui_converter.geometry import Size2, preserve_aspect_footprint
from ui_converter.report import (
    BranchResult,
    ConversionError,
    ConversionReport,
    ConversionResult,
    MissingTemplateError,
    NothingToConvertError,
)
from ui_converter.scene_node import SceneNode
from ui_converter.source_tree import SourceElement
from ui_converter.templates import (
    BACKPLATE,
    BUTTON,
    LABEL,
    OPTIONAL_TEMPLATES,
    SLIDER,
    TemplateLibrary,
    TemplateSpec,
)
from ui_converter.tree_walker import TreeWalker

LOGGER = logging.getLogger("SpatialUIConverter.Converter")
ROOT_NODE_NAME = "Converted UI"


class Converter:
    """Runs one conversion per :meth:`convert` call; holds no state between runs."""

    def __init__(
        self,
        settings: Optional[ConverterSettings] = None,
        library: Optional[TemplateLibrary] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.settings = settings or ConverterSettings()
        self.library = library if library is not None else TemplateLibrary({})
        self._logger = logger or LOGGER

    def required_templates(self) -> Tuple[str, ...]:
        return (BACKPLATE, BUTTON, LABEL, self.settings.toggle_style.template_key, SLIDER)

    def convert(self, root: Optional[SourceElement]) -> ConversionResult:
        try:
            scene, branch = self._run(root)
        except MissingTemplateError as exc:
            self._logger.error("Conversion failed: %s", exc)
            return ConversionResult(scene=None, report=ConversionReport.failed(exc.messages))
        except ConversionError as exc:
            self._logger.error("Conversion failed: %s", exc)
            return ConversionResult(scene=None, report=ConversionReport.failed([str(exc)]))
        report = ConversionReport.succeeded_with(branch)
        self._logger.info(
            "Converted %d node(s) under %r with %d message(s)",
            sum(1 for _ in scene.walk()),
            scene.name,
            len(report.messages),
        )
        return ConversionResult(scene=scene, report=report)

    def footprint_for(self, root: SourceElement) -> Size2:
        width, height = self.settings.footprint
        if self.settings.preserve_aspect_ratio:
            return preserve_aspect_footprint(width, root.size)
        return width, height

    def _toggle_spec(self) -> TemplateSpec:
        key = self.settings.toggle_style.template_key
        spec = self.library.lookup(key)
        if spec is None:
            raise MissingTemplateError([key])
        return spec

    def _run(self, root: Optional[SourceElement]) -> Tuple[SceneNode, BranchResult]:
        missing = self.library.missing(self.required_templates())
        if missing:
            raise MissingTemplateError(missing)
        toggle_spec = self._toggle_spec()
        for key in self.library.missing(OPTIONAL_TEMPLATES):
            self._logger.warning("Optional template '%s' is not available; a fallback will be used", key)
        if root is None or root.rect.is_empty():
            raise NothingToConvertError()

        footprint = self.footprint_for(root)
        self._logger.debug("Target footprint %.3f x %.3f cm", *footprint)
        root_node = self._root_node(footprint)
        walker = TreeWalker(self.settings, self.library, toggle_spec, footprint, logger=self._logger.getChild("Walker"))
        branch = walker.convert_children(root, root_node, footprint)
        return root_node, branch

    def _root_node(self, footprint: Size2) -> SceneNode:
        spec = self.library.lookup(BACKPLATE)
        node = spec.instantiate(ROOT_NODE_NAME)
        native_w, native_h = spec.native_size
        node.transform.set_planar_scale(footprint[0] / native_w, footprint[1] / native_h)
        node.content["size"] = list(footprint)
        return node
