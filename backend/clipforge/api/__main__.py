"""API server entry point for python -m clipforge.api"""
import uvicorn
from clipforge.config import settings

if __name__ == "__main__":
    uvicorn.run(
        "clipforge.api.app:app",
        host=settings.server.host,
        port=settings.server.port,
        reload=False,
        # Single worker: in-flight runs live in this process only
        workers=1,
    )
