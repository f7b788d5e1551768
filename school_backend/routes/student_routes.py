import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from school_backend.auth.dependencies import CurrentUser, get_current_user, require_admin, require_student
from school_backend.auth.passwords import HashingError
from school_backend.database import get_db
from school_backend.schemas import (
    AccountResponse,
    CreateAdminRequest,
    CreateStudentRequest,
    MessageResponse,
    UpdateStudentRequest,
)
from school_backend.services import accounts

router = APIRouter(tags=['students'])

logger = logging.getLogger(__name__)


def _server_error(detail: str, exc: Exception) -> HTTPException:
    logger.error('%s: %s', detail, exc, exc_info=exc)
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail)


def _invalid_search_term(exc: accounts.InvalidSearchPatternError) -> HTTPException:
    logger.info('Rejected search term %r', exc.pattern)
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail='Invalid search term')


@router.get('/student-data', response_model=AccountResponse | None)
def get_student_data(
    current_user: CurrentUser = Depends(require_student),
    db: Session = Depends(get_db),
):
    try:
        return accounts.get_account_by_email(db, current_user.email)
    except SQLAlchemyError as exc:
        raise _server_error('Error fetching student data', exc) from exc


@router.get('/all-data', response_model=list[AccountResponse])
def get_all_data(
    search_term: str = Query(default='', alias='searchTerm'),
    current_user: CurrentUser = Depends(require_admin),
    db: Session = Depends(get_db),
):
    try:
        return accounts.search_accounts(db, search_term, accounts.ALL_DATA_SEARCH_COLUMNS)
    except accounts.InvalidSearchPatternError as exc:
        raise _invalid_search_term(exc) from exc
    except SQLAlchemyError as exc:
        raise _server_error('Error fetching all data', exc) from exc


@router.get('/search', response_model=list[AccountResponse])
def search(
    search_term: str = Query(default='', alias='searchTerm'),
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        return accounts.search_accounts(db, search_term, accounts.SEARCH_COLUMNS)
    except accounts.InvalidSearchPatternError as exc:
        raise _invalid_search_term(exc) from exc
    except SQLAlchemyError as exc:
        raise _server_error('Error performing search', exc) from exc


@router.post('/add-student', response_model=MessageResponse)
def add_student(
    data: CreateStudentRequest,
    current_user: CurrentUser = Depends(require_admin),
    db: Session = Depends(get_db),
):
    try:
        accounts.create_account(
            db,
            email=data.email,
            password=data.password,
            role='student',
            name=data.name,
            number=data.number,
            class_name=data.class_name,
            address=data.address,
        )
    except accounts.DuplicateAccountError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail='User already exists',
        ) from exc
    except (SQLAlchemyError, HashingError) as exc:
        raise _server_error('Error adding student', exc) from exc

    return MessageResponse(message='Student added successfully')


@router.put('/update-student/{student_id}', response_model=MessageResponse)
def update_student(
    student_id: int,
    data: UpdateStudentRequest,
    current_user: CurrentUser = Depends(require_admin),
    db: Session = Depends(get_db),
):
    try:
        accounts.update_account(db, student_id, data.model_dump(exclude_unset=True))
    except accounts.AccountNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail='Student not found') from exc
    except accounts.DuplicateAccountError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail='Another account already uses this email',
        ) from exc
    except (SQLAlchemyError, HashingError) as exc:
        raise _server_error('Error updating student', exc) from exc

    return MessageResponse(message='Student updated successfully')


@router.delete('/remove-student/{student_id}', response_model=MessageResponse)
def remove_student(
    student_id: int,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        accounts.delete_account(db, student_id)
    except accounts.AccountNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail='Student not found') from exc
    except SQLAlchemyError as exc:
        raise _server_error('Error removing student', exc) from exc

    return MessageResponse(message='Student removed successfully')


@router.post('/add-admin', response_model=MessageResponse)
def add_admin(
    data: CreateAdminRequest,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        accounts.create_account(
            db,
            email=data.email,
            password=data.password,
            role='admin',
            name=data.name,
            number=data.number,
            address=data.address,
        )
    except accounts.DuplicateAccountError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail='Admin with the provided email already exists',
        ) from exc
    except (SQLAlchemyError, HashingError) as exc:
        raise _server_error('Error adding admin', exc) from exc

    return MessageResponse(message='Admin added successfully')


@router.get('/all-classes', response_model=list[str])
def get_all_classes(
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        return accounts.list_classes(db)
    except SQLAlchemyError as exc:
        raise _server_error('Error fetching all classes', exc) from exc


@router.get('/students-of-class/{class_name}', response_model=list[AccountResponse])
def get_students_of_class(
    class_name: str,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        return accounts.list_students_of_class(db, class_name)
    except SQLAlchemyError as exc:
        raise _server_error('Error fetching students of class', exc) from exc
