"""
Form helpers for the AngularJS frontend.

Inputs are found through their ``ng-model`` binding, which stays stable
when the markup around them changes.
"""
from __future__ import annotations

from typing import Optional, Union

from selenium.webdriver.common.by import By
from selenium.webdriver.remote.webdriver import WebDriver
from selenium.webdriver.remote.webelement import WebElement

Anchor = Union[WebDriver, WebElement]


def model_selector(model: str) -> str:
    return f'[ng-model="{model}"]'


def input(driver: WebDriver, model: str, value, anchor: Optional[Anchor] = None) -> WebElement:  # noqa: A001
    """Replace the text of the input bound to ``model`` with ``value``.

    ``anchor`` restricts the lookup to a container such as a grid cell.
    """
    root = anchor if anchor is not None else driver
    field = root.find_element(By.CSS_SELECTOR, model_selector(model))
    field.clear()
    field.send_keys(str(value))
    return field


def button(driver: WebDriver, method: str) -> WebElement:
    """Click the button carrying ``data-method="<method>"``."""
    btn = driver.find_element(By.CSS_SELECTOR, f'[data-method="{method}"]')
    btn.click()
    return btn


def xpath_literal(text: str) -> str:
    """Quote ``text`` as an XPath 1.0 string literal.

    XPath has no escape sequences, so text holding both quote kinds is
    built with ``concat()``.
    """
    if '"' not in text:
        return f'"{text}"'
    if "'" not in text:
        return f"'{text}'"
    parts = text.split('"')
    return 'concat(' + ", '\"', ".join(f'"{part}"' for part in parts) + ')'
