"""Run with: python -m feeled_ai"""

import uvicorn

from feeled_ai.config import get_settings

if __name__ == "__main__":
    settings = get_settings()
    uvicorn.run(
        "feeled_ai.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.reload,
    )
