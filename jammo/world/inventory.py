"""Inventory of items carried by the robot."""
import logging
from typing import Callable, List, Optional

from .entities import PickUp

logger = logging.getLogger(__name__)


class Inventory:
    """
    Items the robot has picked up.

    Ownership of a picked-up item moves to the inventory: the item is marked
    held, so the room no longer offers it. Consumed items are destroyed via
    ``on_consumed`` (normally ``WorldRegistry.remove``).
    """

    def __init__(self, on_consumed: Optional[Callable[[PickUp], None]] = None):
        self._items: List[PickUp] = []
        self.on_consumed = on_consumed

    def add_item(self, item: PickUp) -> None:
        item.picked_up()
        self._items.append(item)
        logger.info("picked up %s", item.name)

    def has_item(self, name: str) -> bool:
        return any(item.name == name for item in self._items)

    def consume_item(self, name: str) -> int:
        """Remove every item called ``name``. Returns how many were used."""
        consumed = [item for item in self._items if item.name == name]
        self._items = [item for item in self._items if item.name != name]
        for item in consumed:
            logger.info("%s used", item.name)
            if self.on_consumed is not None:
                self.on_consumed(item)
        return len(consumed)

    @property
    def items(self) -> List[PickUp]:
        return list(self._items)

    def item_names(self) -> List[str]:
        return [item.name for item in self._items]

    def clear(self) -> None:
        self._items.clear()

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, name: str) -> bool:
        return self.has_item(name)
