import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.orm import Session

from nestedset.config import get_settings
from nestedset.lib.db.session import get_session
from nestedset.lib.health import check_database_health, check_tree_health
from nestedset.middleware import RequestContextMiddleware
from nestedset.ops.routes.tree import router as tree_router
from nestedset.tree.nested_set import NestedSet

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=logging.INFO if not settings.debug else logging.DEBUG,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Starting {settings.app_name} in {settings.environment} mode")
    logger.info(f"Tree table: {settings.tree_config().cache_key}")

    yield

    logger.info("Shutting down")


app = FastAPI(title=settings.app_name, debug=settings.debug, lifespan=lifespan)

app.add_middleware(RequestContextMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
def health_check(session: Session = Depends(get_session)):
    checks = {"database": check_database_health(session)}
    if checks["database"]["connected"]:
        checks["tree"] = check_tree_health(NestedSet(session, settings.tree_config()))

    all_healthy = checks.get("tree", {}).get("tree") == "healthy"

    return {
        "status": "healthy" if all_healthy else "degraded",
        "environment": settings.environment,
        "checks": checks,
    }


app.include_router(tree_router, prefix="/api/tree", tags=["tree"])
