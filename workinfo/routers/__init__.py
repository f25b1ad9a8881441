"""HTTP routers (FastAPI) for the WorkInfo API."""
