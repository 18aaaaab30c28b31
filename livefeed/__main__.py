"""Run the API with uvicorn: `python -m livefeed`."""

import uvicorn

from livefeed.core.config import settings


def main() -> None:
    uvicorn.run(
        "livefeed.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
