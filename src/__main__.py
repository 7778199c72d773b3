import uvicorn

from src.config import configure_logging, settings

if __name__ == "__main__":
    configure_logging()
    uvicorn.run(
        "src.api:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload,
    )
