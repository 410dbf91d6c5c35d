"""Run the API server: python -m gtd_engine"""

import uvicorn

from gtd_engine.config import settings

if __name__ == "__main__":
    uvicorn.run(
        "gtd_engine.main:app",
        host=settings.backend_host,
        port=settings.backend_port,
        log_level=settings.log_level.lower(),
    )
