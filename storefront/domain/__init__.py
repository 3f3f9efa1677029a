"""Domain layer - cart, catalog and wizard rules."""
