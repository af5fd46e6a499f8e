from fastapi import FastAPI
import uvicorn
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager

from core.events import register_work_period_handler, unregister_work_period_handler
from core.logging_config import configure_logging
from db.database import async_session_maker, create_db_and_tables
from routers.inventory import router as inventory_router
from routers.periodic_consumptions import router as periodic_consumptions_router
from routers.recipes import router as recipes_router
from routers.work_periods import router as work_periods_router
from services.lifecycle import make_work_period_handler


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    await create_db_and_tables()
    handler = make_work_period_handler(async_session_maker)
    register_work_period_handler(handler)
    yield
    unregister_work_period_handler(handler)


app = FastAPI(
    title="Inventory Costing API",
    description="Periodic inventory consumption and moving-average cost of sold portions",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


app.include_router(work_periods_router, prefix="/work-periods", tags=["work-periods"])
app.include_router(periodic_consumptions_router, prefix="/periodic-consumptions", tags=["periodic-consumptions"])
app.include_router(inventory_router, prefix="/inventory", tags=["inventory"])
app.include_router(recipes_router, prefix="/recipes", tags=["recipes"])

if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
