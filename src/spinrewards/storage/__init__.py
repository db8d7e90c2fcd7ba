"""Persistence plumbing."""
