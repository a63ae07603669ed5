"""FastAPI application package for the task manager service."""
