import uvicorn

from sections_api.core.settings import settings


def main() -> None:
    uvicorn.run(
        "sections_api.asgi:app",
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
