"""Display-mode surfaces toggled by the store's dark mode."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field

DARK_CLASS = "dark"


class DisplaySurface(ABC):
    @abstractmethod
    def set_dark(self, enabled: bool) -> None:
        pass


@dataclass
class DocumentRoot(DisplaySurface):
    """In-process stand-in for a document root element.

    Keeps a class list and a data-theme attribute the way a browser's
    documentElement would, so renderers can read the current mode.
    """

    classes: set[str] = field(default_factory=set)
    attributes: dict[str, str] = field(default_factory=dict)

    def set_dark(self, enabled: bool) -> None:
        if enabled:
            self.classes.add(DARK_CLASS)
            self.attributes["data-theme"] = "dark"
        else:
            self.classes.discard(DARK_CLASS)
            self.attributes["data-theme"] = "light"

    @property
    def is_dark(self) -> bool:
        return DARK_CLASS in self.classes
