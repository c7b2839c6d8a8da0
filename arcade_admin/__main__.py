import uvicorn

from arcade_admin.core.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "arcade_admin.main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        reload=settings.server.reload,
    )


if __name__ == "__main__":
    main()
