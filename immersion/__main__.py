"""Run the API server: ``python -m immersion``."""

import logfire
import uvicorn

from immersion.config import Config


def main() -> None:
    config = Config()  # type: ignore[call-arg]
    # Spans are exported only when LOGFIRE_TOKEN is set
    logfire.configure(service_name="immersion-conventions", send_to_logfire="if-token-present")
    uvicorn.run(
        "immersion.application.api.rest.app:create_app",
        factory=True,
        host=config.server.host,
        port=config.server.port,
    )


if __name__ == "__main__":
    main()
