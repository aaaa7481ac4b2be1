import uvicorn

from meetsync.config import settings

if __name__ == "__main__":
    uvicorn.run("meetsync.main:app", host=settings.host, port=settings.port)
