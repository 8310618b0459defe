from prometheus_fastapi_instrumentator import Instrumentator

from asset_portal.core.config import settings
from asset_portal.core.logging import setup_logging
from . import app as portal_app

setup_logging()
app = portal_app
instrumentator = Instrumentator()
instrumentator.instrument(app).expose(app, include_in_schema=False)


@app.get("/health")
async def health() -> dict[str, bool]:
    return {"ok": True}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("asset_portal.main:app", host=settings.HOST, port=settings.PORT)
