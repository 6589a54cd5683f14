"""The bh-add-item component: a row count input next to an add button."""
from selenium.webdriver.common.by import By
from selenium.webdriver.remote.webdriver import WebDriver

INPUT = 'bh-add-item input[type="number"]'
ADD_BUTTON = 'btn-add-rows'


def set(driver: WebDriver, rows: int) -> None:  # noqa: A001
    """Ask the component to append ``rows`` rows to its grid."""
    field = driver.find_element(By.CSS_SELECTOR, INPUT)
    field.clear()
    field.send_keys(str(rows))
    driver.find_element(By.ID, ADD_BUTTON).click()
