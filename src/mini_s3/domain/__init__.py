"""Domain layer: stored-object values and checksum computation."""
