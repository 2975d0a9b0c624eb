"""
Test suite for Robespierre.

Run with ``pytest Robespierre/test``. Nothing here talks to the real
service; HTTP and the websocket are replaced with mocks.
"""
