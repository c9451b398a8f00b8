"""Web-tier configuration."""
