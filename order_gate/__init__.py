"""Order gate: validation pipeline guarding the order flow."""

__version__ = "1.0.0"
