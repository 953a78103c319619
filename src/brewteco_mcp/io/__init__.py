"""IO - clients for external systems."""
