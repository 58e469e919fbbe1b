"""Value ranges the storage layer can represent."""

# Largest value SQLite stores in an INTEGER column
MAX_DB_INTEGER = 2**63 - 1
