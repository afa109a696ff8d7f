"""Storer implementations."""
