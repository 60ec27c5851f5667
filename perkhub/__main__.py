import uvicorn

from .settings import settings


def main() -> None:
    uvicorn.run("perkhub.main:app", host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
