"""HTTP API for the Vallox gateway."""
