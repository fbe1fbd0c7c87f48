"""Git hooks enforcing commit conventions and embedded documentation checks."""

__version__ = "0.3.0"
