"""HTTP host exposing the marketplace ledger."""
