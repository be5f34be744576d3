"""Backend application: FastAPI app, services, repositories and models."""
