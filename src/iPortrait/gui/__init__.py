"""Qt controllers and background workers."""
