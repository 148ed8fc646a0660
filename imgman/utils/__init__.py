"""Shared utilities for imgman."""
