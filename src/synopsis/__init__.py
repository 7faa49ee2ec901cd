"""Swift declaration parser and canonical source writer."""

__version__ = "0.1.0"
