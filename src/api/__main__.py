"""Run the API with uvicorn: python -m src.api"""

import uvicorn

from .config import settings

if __name__ == "__main__":
    uvicorn.run("src.api.main:app", host=settings.host, port=settings.port, reload=settings.debug)
