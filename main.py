import contextlib
import logging

import uvicorn
from fastapi import FastAPI
from fastapi.concurrency import run_in_threadpool
from fastapi.staticfiles import StaticFiles

from snapboard.config import config
from snapboard.db.session import create_tables
from snapboard.errors import register_error_handlers
from snapboard.routers import register_routers
from snapboard.utils.storage import ensure_storage_dirs

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


@contextlib.asynccontextmanager
async def lifespan(_app: FastAPI):
    await run_in_threadpool(ensure_storage_dirs)
    await create_tables()
    yield


app = FastAPI(title="SnapBoard", lifespan=lifespan)
register_error_handlers(app)
register_routers(app)
app.mount(
    config.PUBLIC_URL_PREFIX,
    StaticFiles(directory=config.STORAGE_PATH, check_dir=False),
    name="uploads",
)


if __name__ == "__main__":
    uvicorn.run("main:app", host=config.FASTAPI_HOST, port=config.FASTAPI_PORT)
