"""Option models, configuration, logging and errors."""
