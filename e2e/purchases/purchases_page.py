"""
Page object for the purchase order page.

Wraps the locators of the purchase-order grid so scenarios can read as
user actions: add rows, pick inventory items, adjust prices and
quantities, then submit.
"""
from __future__ import annotations

from types import SimpleNamespace
from typing import List

from selenium.webdriver.common.by import By
from selenium.webdriver.remote.webdriver import WebDriver
from selenium.webdriver.remote.webelement import WebElement

from e2e.shared import form_utils as FU
from e2e.shared import grid_utils as GU
from e2e.shared.components import add_item

# typeahead dropdowns are appended to <body>, outside the grid cell
TYPEAHEAD_MENU = 'body > ul.dropdown-menu.ng-isolate-scope:not(.ng-hide)'

INVENTORY_COLUMN = 1
QUANTITY_COLUMN = 4
PRICE_COLUMN = 5


class _Button:
    """A lazily located button; the page may re-render between clicks."""

    def __init__(self, driver: WebDriver, by: str, value: str) -> None:
        self.driver = driver
        self.locator = (by, value)

    def element(self) -> WebElement:
        return self.driver.find_element(*self.locator)

    def click(self) -> None:
        self.element().click()


class PurchaseOrderPage:
    grid_id = 'purchase-order-grid'

    def __init__(self, driver: WebDriver) -> None:
        self.driver = driver
        self.btns = SimpleNamespace(
            submit=_Button(driver, By.CSS_SELECTOR, '[data-method="submit"]'),
            add=_Button(driver, By.ID, 'btn-add-rows'),
            clear=_Button(driver, By.CSS_SELECTOR, '[data-method="clear"]'),
        )

    def submit(self) -> None:
        FU.button(self.driver, 'submit')

    def add_rows(self, n: int) -> None:
        add_item.set(self.driver, n)

    def optimal_purchase(self) -> None:
        """Click the 'Optimal Purchase Order' button."""
        self.driver.find_element(By.ID, 'optimal_purchase').click()

    def get_rows(self) -> List[WebElement]:
        return GU.get_rows(self.driver, self.grid_id)

    def add_inventory_item(self, row_number: int, code: str) -> None:
        """Pick the inventory item ``code`` through the row's typeahead."""
        item_cell = GU.data_cell(self.driver, self.grid_id, row_number, INVENTORY_COLUMN)
        FU.input(self.driver, 'row.entity.inventory_uuid', code, item_cell)

        menu = self.driver.find_element(By.CSS_SELECTOR, TYPEAHEAD_MENU)
        option = menu.find_element(
            By.XPATH, f'.//*[@role="option"][contains(normalize-space(.), {FU.xpath_literal(code)})]'
        )
        option.click()

    def adjust_item_price(self, row_number: int, price) -> None:
        price_cell = GU.data_cell(self.driver, self.grid_id, row_number, PRICE_COLUMN)
        FU.input(self.driver, 'row.entity.unit_price', price, price_cell)

    def adjust_item_quantity(self, row_number: int, quantity) -> None:
        quantity_cell = GU.data_cell(self.driver, self.grid_id, row_number, QUANTITY_COLUMN)
        FU.input(self.driver, 'row.entity.quantity', quantity, quantity_cell)

    def reset(self) -> None:
        """Close the confirmation modal."""
        self.driver.find_element(By.CSS_SELECTOR, '[data-action="close"]').click()
