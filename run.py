#!/usr/bin/env python3
"""
Run script for the English Speaking Practice API
"""
import uvicorn

from speaking_api.config.settings import settings
from speaking_api.main import app

if __name__ == "__main__":
    uvicorn.run(app, host=settings.host, port=settings.port, reload=settings.debug)
