"""
Corpdata Gateway - CLI Entry Point
===================================

Usage:
    python -m gateway                  # listen on $PORT (default 3000)
    PORT=8080 python -m gateway
    corpdata-gateway                   # console script installed by pip
"""

import uvicorn

from gateway.config import settings


def main() -> None:
    uvicorn.run(
        "gateway.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
