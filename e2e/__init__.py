"""
End-to-end browser tests for the hospital management frontend.

Page objects under this package wrap the element locators of one page
each; they carry no business logic. Scenarios only run when
``E2E_BASE_URL`` points at a running frontend.
"""
