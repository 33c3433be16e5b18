import uvicorn

from app.core.config import get_settings


def run() -> None:
    """Serve app.main:app on the configured address."""
    settings = get_settings()
    uvicorn.run(
        "app.main:app",
        host=settings.server.host,
        port=settings.server.port,
        log_config=None,
    )


if __name__ == "__main__":
    run()
