"""Shared utilities for labctl."""
