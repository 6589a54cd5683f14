"""
Locators for ui-grid tables.

ui-grid renders rows and columns through ``ng-repeat``; those repeat
expressions are the only stable hooks into the rendered cells.
"""
from __future__ import annotations

from typing import List

from selenium.webdriver.common.by import By
from selenium.webdriver.remote.webdriver import WebDriver
from selenium.webdriver.remote.webelement import WebElement

BODY_CONTAINER = '.ui-grid-render-container-body'
ROW_REPEATER = '(rowRenderIndex, row) in rowContainer.renderedRows track by $index'
COLUMN_REPEATER = '(colRenderIndex, col) in colContainer.renderedColumns track by col.uid'


def repeater(expression: str) -> str:
    return f'[ng-repeat="{expression}"]'


def get_grid(driver: WebDriver, grid_id: str) -> WebElement:
    return driver.find_element(By.ID, grid_id)


def get_rows(driver: WebDriver, grid_id: str) -> List[WebElement]:
    body = get_grid(driver, grid_id).find_element(By.CSS_SELECTOR, BODY_CONTAINER)
    return body.find_elements(By.CSS_SELECTOR, repeater(ROW_REPEATER))


def data_cell(driver: WebDriver, grid_id: str, row: int, col: int) -> WebElement:
    """Return the cell at zero-based ``row`` and ``col`` of the grid body."""
    rows = get_rows(driver, grid_id)
    if row >= len(rows):
        raise IndexError(f'{grid_id} has {len(rows)} rendered rows, wanted row {row}')
    cells = rows[row].find_elements(By.CSS_SELECTOR, repeater(COLUMN_REPEATER))
    if col >= len(cells):
        raise IndexError(f'{grid_id} row {row} has {len(cells)} columns, wanted column {col}')
    return cells[col]
