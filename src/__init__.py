"""Vidtube backend."""
