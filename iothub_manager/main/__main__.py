"""
Main module entry point.

Serves the API with uvicorn: python -m iothub_manager.main
"""

import uvicorn

from iothub_manager.main.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "iothub_manager.main.app:app",
        host=settings.ge.host,
        port=settings.ge.port,
        reload=settings.ge.reload,
        log_config=None,
    )


if __name__ == "__main__":
    main()
