"""Shared logging and console helpers."""
