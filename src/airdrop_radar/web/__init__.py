"""Web dashboard and JSON API."""
