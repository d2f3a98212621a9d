"""Tests for the public entry point."""


def test_home_page(http_client):
    response = http_client.get("/")

    assert response.status_code == 200
    assert b"Scan the QR code" in response.content
    assert b'href="/dashboard/"' in response.content
