import logging

from fastapi import APIRouter, Depends, File, Form, HTTPException, Response, UploadFile, status
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from school_backend.auth import jwt_handler
from school_backend.auth.passwords import HashingError
from school_backend.core.config import Settings, get_settings
from school_backend.database import get_db
from school_backend.schemas import (
    AdminRegistrationRequest,
    LoginRequest,
    LoginResponse,
    MessageResponse,
    StudentRegistrationRequest,
)
from school_backend.services import accounts, uploads

router = APIRouter(tags=['auth'])

logger = logging.getLogger(__name__)


def registration_form(
    email: str = Form(...),
    password: str = Form(...),
    role: str = Form(...),
    name: str | None = Form(default=None),
    number: str | None = Form(default=None),
    class_name: str | None = Form(default=None, alias='class'),
    address: str | None = Form(default=None),
    father_name: str | None = Form(default=None, alias='fatherName'),
    mother_name: str | None = Form(default=None, alias='motherName'),
    age: int | None = Form(default=None),
    birthdate: str | None = Form(default=None),
    gender: str | None = Form(default=None),
) -> StudentRegistrationRequest:
    try:
        return StudentRegistrationRequest(
            email=email,
            password=password,
            role=role,
            name=name,
            number=number,
            class_name=class_name,
            address=address,
            father_name=father_name,
            mother_name=mother_name,
            age=age,
            birthdate=birthdate,
            gender=gender,
        )
    except ValidationError as exc:
        raise RequestValidationError(exc.errors()) from exc


@router.post('/register', response_model=MessageResponse)
def register(
    data: StudentRegistrationRequest = Depends(registration_form),
    passport_image: UploadFile | None = File(default=None, alias='passportImage'),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    try:
        image_name = uploads.save_passport_image(passport_image, settings)
    except uploads.UploadTooLargeError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    profile = data.model_dump(exclude={'email', 'password', 'role'})
    try:
        accounts.create_account(
            db,
            email=data.email,
            password=data.password,
            role=data.role,
            passport_image=image_name,
            **profile,
        )
    except accounts.DuplicateAccountError as exc:
        uploads.discard_upload(image_name, settings)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={'error': 'User already exists. Please log in.', 'loginLink': '/login'},
        ) from exc
    except (SQLAlchemyError, HashingError) as exc:
        uploads.discard_upload(image_name, settings)
        logger.exception('Error saving user to the database')
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail='Error saving user to the database',
        ) from exc

    return MessageResponse(message='Registration successful')


@router.post('/register-admin', response_model=MessageResponse)
def register_admin(data: AdminRegistrationRequest, db: Session = Depends(get_db)):
    try:
        accounts.create_account(
            db,
            email=data.email,
            password=data.password,
            role='admin',
            name=data.name,
            number=data.number,
            address=data.address,
            gender=data.gender,
        )
    except accounts.DuplicateAccountError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail='Admin with the provided email already exists',
        ) from exc
    except (SQLAlchemyError, HashingError) as exc:
        logger.exception('Error saving admin to the database')
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail='Error saving admin to the database',
        ) from exc

    return MessageResponse(message='Admin registered successfully')


@router.post('/login', response_model=LoginResponse)
def login(
    data: LoginRequest,
    response: Response,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    try:
        user = accounts.authenticate(db, data.email, data.password)
    except SQLAlchemyError as exc:
        logger.exception('Error during login')
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail='Error during login') from exc

    if user is None:
        logger.warning('Invalid credentials')
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail='Invalid credentials')

    token = jwt_handler.create_access_token(settings, email=user.email, role=user.role)
    # Same lifetime as the token itself; the cookie is not accepted by the access gate.
    response.set_cookie(
        key=settings.cookie_name,
        value=token,
        max_age=settings.jwt_expires_minutes * 60,
        httponly=True,
        secure=settings.cookie_secure,
        samesite='lax',
    )
    return LoginResponse(token=token, role=user.role)
