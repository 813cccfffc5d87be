"""Audit of a language-learning content database against its audio storage bucket."""

__version__ = "0.1.0"
