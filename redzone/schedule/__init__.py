"""NFL schedule, effective week and game filtering."""
