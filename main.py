"""
Entry point for `uvicorn main:app`.
"""

from billsplit.main import app
from billsplit.core.config import settings

if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host=settings.HOST, port=settings.PORT, reload=settings.DEBUG)
