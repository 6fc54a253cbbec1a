"""Render CMS rich-text documents to embeddable HTML fragments."""

__version__ = "0.1.0"
