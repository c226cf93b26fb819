class InvalidInput(ValueError):
    """Raised for zero-area or malformed pixel buffers, bad colors and non-positive counts."""
