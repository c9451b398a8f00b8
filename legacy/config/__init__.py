"""Root-tier configuration classes."""
