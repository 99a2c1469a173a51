"""HTTP API for the chat engine."""
