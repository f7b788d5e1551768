import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy.exc import SQLAlchemyError

from school_backend.core.config import Settings, load_settings, validate_runtime_config
from school_backend.database import build_engine, build_session_factory, init_schema
from school_backend.routes import auth_routes, mail_routes, student_routes

logger = logging.getLogger(__name__)


def _invalid_fields(exc: RequestValidationError) -> list[str]:
    fields: list[str] = []
    for error in exc.errors():
        location = [str(part) for part in error.get('loc', ()) if part not in ('body', 'query', 'path')]
        field = '.'.join(location) or 'body'
        if field not in fields:
            fields.append(field)
    return fields


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    fields = _invalid_fields(exc)
    logger.info('Validation error on %s: %s', request.url.path, fields)
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={'detail': 'Invalid request data', 'fields': fields},
    )


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or load_settings()
    validate_runtime_config(settings)

    engine = build_engine(settings.database_url)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        try:
            init_schema(engine)
        except SQLAlchemyError:
            logger.exception('Database initialization failed. Check DATABASE_URL.')
        yield
        engine.dispose()

    app = FastAPI(title='School Registration API', lifespan=lifespan)
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = build_session_factory(engine)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_credentials=True,
        allow_methods=['*'],
        allow_headers=['*'],
    )
    app.add_exception_handler(RequestValidationError, request_validation_handler)

    upload_dir = Path(settings.upload_dir)
    upload_dir.mkdir(parents=True, exist_ok=True)
    app.mount('/uploads', StaticFiles(directory=upload_dir), name='uploads')

    @app.get('/')
    def root():
        return {'status': 'School Registration API Running'}

    app.include_router(auth_routes.router)
    app.include_router(student_routes.router)
    app.include_router(mail_routes.router)

    return app
