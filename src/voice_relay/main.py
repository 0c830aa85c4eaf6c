import logging
import uvicorn
from voice_relay.settings import settings


logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)


def main() -> None:
    uvicorn.run(
        "voice_relay.app:create_app",
        factory=True,
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.RELOAD,
        log_level="info",
    )

if __name__ == "__main__":
    main()
