"""Show/hide behaviour for converted collapsible regions."""
from __future__ import annotations

import logging
from typing import Optional

from ui_converter.scene_node import SceneNode
from ui_runtime.event_bindings import ACTIVATED, EventRegistry, Subscription

LOGGER = logging.getLogger("SpatialUIConverter.Runtime")


class ExpandController:
    """Flips the visibility of a region's content node when its header is activated."""

    def __init__(self, content: SceneNode) -> None:
        self.content = content
        self._subscription: Optional[Subscription] = None

    @property
    def expanded(self) -> bool:
        return self.content.visible

    def on_activate(self, _payload: object = None) -> bool:
        self.content.visible = not self.content.visible
        LOGGER.debug("Region %r %s", self.content.name, "expanded" if self.content.visible else "collapsed")
        return self.content.visible

    def bind(self, registry: EventRegistry, header: object) -> Subscription:
        """Subscribe to activation events emitted by ``header``."""

        self.unbind()
        self._subscription = registry.subscribe(ACTIVATED, self.on_activate, source=header)
        return self._subscription

    def unbind(self) -> None:
        if self._subscription is not None:
            self._subscription.cancel()
            self._subscription = None
