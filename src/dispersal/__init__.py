"""DISPERSAL — aircraft placement and auto-distribution across bases."""

__version__ = "0.1.0"
