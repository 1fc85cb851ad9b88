"""Model discovery, tier classification and the persisted tier record."""
