"""
Main FastAPI application entry point.
"""

from ticketdesk.app import create_app
from ticketdesk.core.config import settings

# Create application instance
app = create_app()


def run() -> None:
    """Console entry point: serve the API with uvicorn."""
    import uvicorn

    uvicorn.run(
        "ticketdesk.main:app",
        host=settings.api.host,
        port=settings.api.port,
        reload=settings.api.debug,
        workers=1 if settings.api.debug else settings.api.workers,
        log_level="info",
        access_log=True,
        timeout_graceful_shutdown=10,
        server_header=False,
        timeout_keep_alive=5,
    )


if __name__ == "__main__":
    run()
