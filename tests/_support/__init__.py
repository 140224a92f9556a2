"""Test support helpers shared across bossdesk test packages."""
