"""Verifiable credential store backed by an encrypted data vault."""
