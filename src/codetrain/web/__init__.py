"""Web API: FastAPI app, routes and sessions."""
