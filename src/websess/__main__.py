"""websess entrypoint.

Run with:
  python -m websess
"""

import os

import uvicorn

from websess.config import load_settings
from websess.logging import setup_logging


def main() -> None:
    setup_logging(load_settings().log_level, log_dir=os.getenv("WEBSESS_LOG_DIR") or None)
    host = os.getenv("WEBSESS_HOST", "0.0.0.0")
    port = int(os.getenv("WEBSESS_PORT", "8000"))
    reload = os.getenv("WEBSESS_RELOAD", "false").lower() in {"1", "true", "yes", "y"}
    uvicorn.run("websess.app:create_app", factory=True, host=host, port=port, reload=reload, log_config=None)


if __name__ == "__main__":
    main()
