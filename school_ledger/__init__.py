"""School ledger: double-entry accounting core."""

__version__ = "0.1.0"
