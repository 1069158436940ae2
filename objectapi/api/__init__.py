"""HTTP layer (Flask blueprints) for the objectapi application."""
