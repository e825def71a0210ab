"""Shared utilities: logging, exceptions and date handling."""
