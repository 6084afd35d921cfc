"""Main application entry point for the FastAPI application.

Run with ``uvicorn radio_auth.main:app``.
"""

from radio_auth.core.application import create_application
from radio_auth.core.initialization import initialize_application

initialize_application()

app = create_application()
