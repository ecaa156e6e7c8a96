"""Table declarations, one module per GitHub resource family."""
