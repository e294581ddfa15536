"""Command-line entrypoint that serves the API with uvicorn."""

import uvicorn

from diverge_backend.config import Settings


def main() -> None:
    """Run the API on the configured port."""
    settings = Settings()
    uvicorn.run(
        "diverge_backend.api.asgi:app",
        host="0.0.0.0",  # noqa: S104
        port=settings.port,
    )


if __name__ == "__main__":
    main()
