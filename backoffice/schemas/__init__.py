"""Request validation schemas."""
