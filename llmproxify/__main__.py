import logging

import uvicorn

from llmproxify.vars import HOST, LOG_LEVEL, PORT

logger = logging.getLogger("uvicorn.error")


def main() -> None:
    config = uvicorn.Config(
        "llmproxify.server:app", host=HOST, port=PORT, log_level=LOG_LEVEL
    )
    server = uvicorn.Server(config)
    logger.info(f"Listening on {HOST}:{PORT}")
    server.run()


if __name__ == "__main__":
    main()
