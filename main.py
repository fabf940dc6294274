import logging
from contextlib import asynccontextmanager

import boto3
import firebase_admin
from botocore.config import Config
from dotenv import load_dotenv
from fastapi import FastAPI
from firebase_admin import credentials
from firebase_admin import firestore as fs
from starlette.middleware.cors import CORSMiddleware

from config import Settings, get_settings
from context import RequestContextMiddleware, RequestIdFilter
from errors import register_exception_handlers
from routes.auth import router as auth_router
from routes.posts import router as posts_router
from routes.users import router as users_router
from services.comments import CommentLog
from services.firestore import FirestoreDB
from services.posts import PostRepository
from services.s3 import S3Service
from services.tokens import TokenService
from services.users import UserService
from utils.passwords import PasswordHasher

load_dotenv()

logger = logging.getLogger(__name__)


def configure_logging(level: str):
    handler = logging.StreamHandler()
    handler.addFilter(RequestIdFilter())
    handler.setFormatter(logging.Formatter(
        "%(asctime)s %(levelname)s [%(request_id)s] %(name)s: %(message)s"
    ))
    logging.basicConfig(level=level.upper(), handlers=[handler], force=True)


def init_services(app: FastAPI, settings: Settings, db_client, s3_client):
    """Build the services once and share them through app state"""
    firestore = FirestoreDB(db_client)
    token_service = TokenService(
        settings.jwt_secret_key,
        algorithm=settings.jwt_algorithm,
        expires_minutes=settings.access_token_expire_minutes,
    )
    hasher = PasswordHasher(rounds=settings.bcrypt_rounds)

    app.state.firestore = firestore
    app.state.token_service = token_service
    app.state.user_service = UserService(firestore, token_service, hasher)
    app.state.post_repository = PostRepository(firestore)
    app.state.comment_log = CommentLog(firestore)
    app.state.s3_service = S3Service(settings.s3_bucket_name, s3_client, settings.max_image_size_mb)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    configure_logging(settings.log_level)

    # Initialize Firebase Admin SDK
    cred = credentials.Certificate(settings.firebase_credentials)
    firebase_app = firebase_admin.initialize_app(cred)

    # S3 client
    s3_client = boto3.client(
        's3',
        aws_access_key_id=settings.aws_access_key_id,
        aws_secret_access_key=settings.aws_secret_access_key,
        region_name=settings.aws_region,
        config=Config(signature_version="s3v4")
    )

    init_services(app, settings, fs.client(firebase_app), s3_client)
    logger.info("Blog API started")

    yield
    # Cleanup resources
    firebase_admin.delete_app(firebase_app)


app = FastAPI(title="Blog API", lifespan=lifespan)

# middleware to tag requests with an id
app.add_middleware(RequestContextMiddleware)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID"]
)

register_exception_handlers(app)

# Include routers
app.include_router(auth_router, prefix="/api", tags=["auth"])
app.include_router(posts_router, prefix="/api/posts", tags=["posts"])
app.include_router(users_router, prefix="/api/users", tags=["users"])
