"""Run the API server: ``python -m videotube``."""

import uvicorn

from videotube.commons.settings import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "videotube.api.main:app",
        host=settings.server.host,
        port=settings.server.port,
        workers=settings.server.workers,
        reload=settings.server.reload,
        log_level=settings.telemetry.log_level.lower(),
    )


if __name__ == "__main__":
    main()
