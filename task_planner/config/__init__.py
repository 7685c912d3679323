"""Settings, logging and tracing configuration."""
