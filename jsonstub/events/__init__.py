"""Live request log broadcasting."""
