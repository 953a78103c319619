"""Test suite for brewteco_mcp."""
