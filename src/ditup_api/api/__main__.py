"""
ditup_api.api.__main__

Serve the API: `python -m ditup_api.api` or the `ditup-api` console script.
Host, port and everything else come from `DITUP_*` environment variables.
"""

from __future__ import annotations

import uvicorn

from ditup_api.api.app import create_app
from ditup_api.settings import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        create_app(settings=settings),
        host=settings.api_host,
        port=settings.api_port,
        # Logging is structlog's; the request middleware writes the access log.
        log_config=None,
        access_log=False,
        proxy_headers=True,
    )


if __name__ == "__main__":
    main()
