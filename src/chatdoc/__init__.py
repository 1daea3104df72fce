"""chatdoc - converse with a language-model server through a plain-text transcript."""

__version__ = "0.1.0"
