from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.v1.academic_years.router import router as academic_years_router
from app.api.v1.fee_items.router import router as fee_items_router
from app.api.v1.fees.router import router as fees_router
from app.api.v1.students.router import router as students_router
from app.core.logging import configure_logging
from app.db.session import create_tables


@asynccontextmanager
async def lifespan(app: FastAPI):
    await create_tables()
    yield


def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(title="Student Fee Ledger", lifespan=lifespan)

    # CORS: the browser front end is served separately
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Routers
    app.include_router(academic_years_router)
    app.include_router(fee_items_router)
    app.include_router(fees_router)
    app.include_router(students_router)

    return app


app = create_app()
