"""Menu lookup plugin for the host agent."""

import logging
from dataclasses import dataclass
from typing import Annotated, List, Optional

from semantic_kernel.functions import kernel_function

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MenuItem:
    """A single dish or drink on the menu."""
    category: str
    name: str
    price: float
    is_special: bool = False


MENU_ITEMS = (
    MenuItem(category="Soup", name="Clam Chowder", price=4.95, is_special=True),
    MenuItem(category="Soup", name="Tomato Soup", price=4.95),
    MenuItem(category="Salad", name="Cobb Salad", price=9.99),
    MenuItem(category="Salad", name="House Salad", price=4.95),
    MenuItem(category="Drink", name="Chai Tea", price=2.95, is_special=True),
    MenuItem(category="Drink", name="Soda", price=1.95),
)


class MenuPlugin:
    """
    Semantic Kernel plugin exposing a fixed, in-memory menu.

    Provides functions for:
    - Listing the full menu
    - Listing today's specials
    - Looking up the price of an item by name
    """

    plugin_name = "menu"

    def __init__(self, items=MENU_ITEMS):
        self._items = tuple(items)
        logger.info(f"Initialized MenuPlugin with {len(self._items)} items")

    @kernel_function(
        name="get_menu",
        description="Provides the full list of items on the menu."
    )
    def get_menu(self) -> List[MenuItem]:
        return list(self._items)

    @kernel_function(
        name="get_specials",
        description="Provides a list of specials from the menu."
    )
    def get_specials(self) -> List[MenuItem]:
        return [item for item in self._items if item.is_special]

    @kernel_function(
        name="get_item_price",
        description="Provides the price of the requested menu item."
    )
    def get_item_price(
        self,
        menu_item: Annotated[str, "The name of the menu item."]
    ) -> Optional[float]:
        """
        Look up a price by item name, ignoring case.

        Returns:
            The price, or None when the item is not on the menu
        """
        wanted = menu_item.strip().lower()
        for item in self._items:
            if item.name.lower() == wanted:
                return item.price

        logger.info(f"Menu item not found: {menu_item!r}")
        return None
