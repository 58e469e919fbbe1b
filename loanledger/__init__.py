"""Material loan ledger: catalog, borrowers and an atomic loan/return stock ledger."""

__version__ = "1.0.0"
