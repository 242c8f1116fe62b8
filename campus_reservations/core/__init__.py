"""Core application components: exceptions and HTTP middleware."""
