"""Cross-league lineup aggregation."""
