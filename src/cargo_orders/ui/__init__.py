"""Command-line surface for cargo-orders."""
