"""Authenticated contact book service."""
