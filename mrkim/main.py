import logging
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from .core.database import init_db, SessionLocal
from .core.config import settings
from .core.errors import AuthError
from .core.security import get_password_hash
from .models.user import User, Role
from .routers.auth import router as auth_router

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title=settings.APP_NAME)

# Configure CORS
raw_origins = settings.CORS_ORIGINS or "*"
origins = [o.strip() for o in raw_origins.split(",") if o.strip()] if isinstance(raw_origins, str) else raw_origins
allow_credentials = False if "*" in origins else True
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=allow_credentials,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(AuthError)
async def auth_error_handler(request: Request, exc: AuthError):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


# Create tables
init_db()


def seed_admin(db) -> bool:
    """Create the bootstrap admin from ADMIN_EMAIL / ADMIN_PASSWORD if it does not exist."""
    if not settings.ADMIN_EMAIL or not settings.ADMIN_PASSWORD:
        return False
    if db.query(User).filter(User.email == settings.ADMIN_EMAIL).first():
        return False

    admin = User(
        username="admin",
        email=settings.ADMIN_EMAIL,
        password_hash=get_password_hash(settings.ADMIN_PASSWORD),
        role=Role.ADMIN,
        email_verified=True,
    )
    db.add(admin)
    db.commit()
    logger.info(f"Seeded admin account {settings.ADMIN_EMAIL}")
    return True


with SessionLocal() as db:
    seed_admin(db)

# Routers
app.include_router(auth_router)

@app.get("/")
def root():
    return {"status": "ok"}

@app.get("/health")
def health():
    return {"status": "healthy"}
