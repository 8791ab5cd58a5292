"""
hipp_admin.api.__main__

`python -m hipp_admin.api` / `hipp-admin` console script.

Configuration comes from `HIPP_*` environment variables (or `.env`); a missing
JWT secret, issuer or audience stops the process before uvicorn binds a port.
"""

from __future__ import annotations

import uvicorn

from hipp_admin.api.app import create_app
from hipp_admin.settings import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        create_app(settings=settings),
        host=settings.api_host,
        port=settings.api_port,
        # structlog owns formatting; RequestContextMiddleware writes the access line.
        log_config=None,
        access_log=False,
        proxy_headers=settings.env == "prod",
    )


if __name__ == "__main__":
    main()
