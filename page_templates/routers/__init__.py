"""API routers for the page templates application."""
