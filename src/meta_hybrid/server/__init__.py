"""Status API server - configuration, snapshot state, and HTTP routes."""
