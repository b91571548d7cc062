"""API routers for the settlement workbench."""
