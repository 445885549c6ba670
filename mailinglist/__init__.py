"""Double opt-in mailing list with newsletter fan-out delivery."""

__version__ = "0.1.0"
