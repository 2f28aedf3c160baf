"""langtranslator: Translate locale language files through machine-translation providers."""

__version__ = "0.1.0"
