from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pymongo.database import Database
from pymongo.errors import PyMongoError
from app.database import ensure_indexes, get_db
from app.errors import register_exception_handlers
from app.routes import auth, courses, students, goals, performance, teachers
from dotenv import load_dotenv
import logging
import os

load_dotenv()

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    ensure_indexes(get_db())
    logger.info("Database indexes ready")
    yield


app = FastAPI(
    redirect_slashes=False,
    title="Student Success API",
    description="Courses, rosters, grades and student profiles for students and teachers",
    version="1.0.0",
    lifespan=lifespan,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=[os.getenv("FRONTEND_URL", "http://localhost:3000")],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# Include routers
app.include_router(auth.router, prefix="/api/auth", tags=["Auth"])
app.include_router(courses.router, prefix="/api/courses", tags=["Courses"])
app.include_router(goals.router, prefix="/api/students/profile/goals", tags=["Students"])
app.include_router(students.router, prefix="/api/students", tags=["Students"])
app.include_router(performance.router, prefix="/api/performance", tags=["Performance"])
app.include_router(teachers.router, prefix="/api/teachers", tags=["Teachers"])


@app.get("/health")
def health(db: Database = Depends(get_db)):
    try:
        db.command("ping")
    except PyMongoError as e:
        logger.error(f"Health check failed: {e}")
        return JSONResponse(status_code=503, content={"status": "degraded", "database": "unavailable"})
    return {"status": "ok", "database": "connected"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("app.main:app", host="0.0.0.0", port=int(os.getenv("PORT", 5000)))
