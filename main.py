"""VocaHire Realtime Relay - Main Entry Point."""

import uvicorn

from vocahire.api import create_app
from vocahire.config import get_settings


def main():
    """Run the VocaHire realtime relay server."""
    settings = get_settings()

    app = create_app(settings=settings)

    uvicorn.run(
        app,
        host=settings.api_host,
        port=settings.api_port,
        log_level="info",
    )


if __name__ == "__main__":
    main()
