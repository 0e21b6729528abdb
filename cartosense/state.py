"""Session state: which attribute the views currently express."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from cartosense import config

logger = logging.getLogger(__name__)


class UnknownAttributeError(ValueError):
    """The requested attribute is not one of the session's attributes."""


@dataclass(frozen=True)
class SelectionChanged:
    """Command issued when the user picks an attribute in the dropdown."""

    attribute: str


@dataclass
class MapSession:
    """Single source of truth for the expressed attribute.

    Passed explicitly to every render call so that map and chart always read
    the same value.
    """

    attributes: tuple[str, ...] = config.ATTRIBUTES
    expressed: str = field(default="")

    def __post_init__(self):
        if not self.attributes:
            raise ValueError("A session needs at least one attribute")
        self.attributes = tuple(self.attributes)
        if not self.expressed:
            self.expressed = self.attributes[0]
        elif self.expressed not in self.attributes:
            raise UnknownAttributeError(self.expressed)

    def select(self, attribute: str) -> None:
        if attribute not in self.attributes:
            raise UnknownAttributeError(
                f"Unknown attribute '{attribute}', expected one of {list(self.attributes)}"
            )
        logger.info("Expressed attribute: %s -> %s", self.expressed, attribute)
        self.expressed = attribute
