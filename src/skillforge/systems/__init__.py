"""Capability phase functions and post-derivation rules (success tests)."""
