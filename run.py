"""
Development entry point. In production run:
    uvicorn calycompta.app:app --host 0.0.0.0 --port 8000
"""

import uvicorn

from calycompta.config import settings

if __name__ == "__main__":
    uvicorn.run(
        "calycompta.app:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
    )
