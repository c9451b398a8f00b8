"""Infrastructure health checks."""
