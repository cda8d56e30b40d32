"""HTTP API - FastAPI routes for health and learner sessions."""
