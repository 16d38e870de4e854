"""Vallox Serial - a Vallox Digit (RS485) telegram decoder & client."""

__version__ = "0.4.2"
VERSION = __version__
