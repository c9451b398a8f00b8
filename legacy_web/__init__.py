"""Web tier: front controller, MVC configuration and file uploads."""
