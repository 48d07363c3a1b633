import logging
from contextlib import asynccontextmanager
from fastapi import Depends, FastAPI
from sqlalchemy.orm import Session
from app.config import settings
from app.db.database import Base, engine, get_db, check_db_connection
from app.api.v1.routes.groups import router as groups_router
from app.api.v1.routes.expenses import router as expenses_router
from app.api.v1.routes.settlements import router as settlements_router
from app.rabbitmq.producer import close_rabbitmq_producer
from app.utils.exceptions import register_exception_handlers
# Register every table on Base.metadata
from app.models import users, groups, expenses, settlements  # noqa: F401

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    Base.metadata.create_all(bind=engine)
    logger.info("Split Service started")
    yield
    close_rabbitmq_producer()


app = FastAPI(
    title="Split Service - Group Debt Settlement",
    description="Manages groups, shared expenses, settlements and settle-up suggestions",
    version="1.0.0",
    lifespan=lifespan,
)

register_exception_handlers(app)

app.include_router(groups_router)
app.include_router(expenses_router)
app.include_router(settlements_router)


@app.get("/")
def read_root():
    return {"message": "Split Service API", "version": "1.0.0"}


@app.get("/health")
def health_check(db: Session = Depends(get_db)):
    database_ok = check_db_connection(db)
    return {"status": "healthy" if database_ok else "degraded", "database": database_ok}
