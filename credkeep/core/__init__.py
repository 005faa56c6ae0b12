"""Credential lifecycle engine — registry, store, import, verification, tokens."""
