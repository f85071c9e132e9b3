"""Extraction engine: path evaluation, value handling and collection."""
