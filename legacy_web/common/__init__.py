"""Web-tier cross-cutting components: controller advice and interceptors."""
