"""Run the API with uvicorn using host/port from settings: ``python -m app``."""
import uvicorn

from app.core.settings import get_settings


def main():
    settings = get_settings()
    uvicorn.run("app.main:app", host=settings.host, port=settings.port, reload=False)


if __name__ == "__main__":
    main()
