"""dcr-wallet — Decred transaction authoring engine."""

__version__ = "0.1.0"
