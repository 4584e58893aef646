"""Depth-first dispatch of source children to their instantiation policies."""
from __future__ import annotations

import logging
from typing import Optional

from ui_converter.converter_config import ConverterSettings
from ui_converter.geometry import Size2
from ui_converter.policies import policy_for
from ui_converter.report import BranchResult
from ui_converter.scene_node import SceneNode
from ui_converter.source_tree import SourceElement
from ui_converter.templates import TemplateLibrary, TemplateSpec

LOGGER = logging.getLogger("SpatialUIConverter.Converter.Walker")


class TreeWalker:
    """Holds the per-run context the policies read; carries no mutable report state."""

    def __init__(
        self,
        settings: ConverterSettings,
        library: TemplateLibrary,
        toggle_spec: TemplateSpec,
        footprint: Size2,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.settings = settings
        self.library = library
        self.toggle_spec = toggle_spec
        self.footprint = footprint
        self._logger = logger or LOGGER

    def convert_children(self, element: SourceElement, parent_node: SceneNode, parent_size: Size2) -> BranchResult:
        """Convert every visible, non-empty child of ``element`` under ``parent_node``."""

        result = BranchResult()
        for child in element.children:
            if not child.style.visible:
                self._logger.debug("Skipping hidden element %r", child.display_name())
                continue
            if child.rect.is_empty():
                self._logger.debug("Skipping zero-sized element %r", child.display_name())
                continue
            policy = policy_for(child.kind)
            result.merge(policy(self, child, parent_node, parent_size))
        return result
