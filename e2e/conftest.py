import os

import pytest


@pytest.fixture
def base_url():
    url = os.getenv('E2E_BASE_URL')
    if not url:
        pytest.skip('E2E_BASE_URL is not set')
    return url.rstrip('/')


@pytest.fixture
def browser(base_url):
    """A headless browser session; Chrome unless E2E_BROWSER=firefox."""
    from selenium import webdriver

    if os.getenv('E2E_BROWSER', 'chrome').lower() == 'firefox':
        options = webdriver.FirefoxOptions()
        options.add_argument('-headless')
        driver = webdriver.Firefox(options=options)
    else:
        options = webdriver.ChromeOptions()
        options.add_argument('--headless=new')
        driver = webdriver.Chrome(options=options)
    driver.implicitly_wait(float(os.getenv('E2E_IMPLICIT_WAIT', '5')))
    yield driver
    driver.quit()
