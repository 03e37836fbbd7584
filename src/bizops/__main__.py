"""Entry point for running the application with uvicorn."""

import uvicorn

from bizops.config import configure_logging, settings


def main() -> None:
    """Run the application."""
    configure_logging(settings.log_level)
    uvicorn.run(
        "bizops.api.app:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
    )


if __name__ == "__main__":
    main()
