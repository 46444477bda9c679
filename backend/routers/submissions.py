"""
Manuscript submission endpoints for authors.

Admin status changes and conversion to an article live in routers/admin.py.
"""

import logging

from fastapi import APIRouter, BackgroundTasks, Depends, File, Form, HTTPException, UploadFile, status

from config.settings import settings
from exceptions import AppError
from models import User
from schemas.review import ReviewList
from schemas.submission import (
    FileUploadResponse, SignedUrlResponse, Submission, SubmissionCreate, SubmissionFileType,
    SubmissionList, SubmissionUpdate,
)
from services import auth_service
from services.notification_service import notify_submission_created
from services.review_service import ReviewService, get_review_service
from services.storage_service import StorageService, get_storage_service
from services.submission_service import SubmissionService, get_submission_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/submissions", tags=["submissions"])


@router.get("", response_model=SubmissionList, summary="List submissions")
async def list_submissions(
    current_user: User = Depends(auth_service.validate_token),
    service: SubmissionService = Depends(get_submission_service),
):
    """The caller's own submissions; admins see all."""
    submissions = await service.list_submissions(current_user)
    return SubmissionList(
        submissions=[Submission.model_validate(s) for s in submissions],
        total=len(submissions),
    )


@router.post("", response_model=Submission, status_code=status.HTTP_201_CREATED, summary="Submit a manuscript")
async def create_submission(
    body: SubmissionCreate,
    background_tasks: BackgroundTasks,
    current_user: User = Depends(auth_service.validate_token),
    service: SubmissionService = Depends(get_submission_service),
):
    """
    Create the submission, then email the confirmation and editor alert in
    the background. A failed email does not undo the submission.
    """
    try:
        submission = await service.create(current_user, body)
    except (HTTPException, AppError):
        raise
    except Exception as e:
        logger.error(f"create_submission failed for user {current_user.user_id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to submit manuscript",
        )

    background_tasks.add_task(notify_submission_created, submission.id)
    return submission


@router.post("/files", response_model=FileUploadResponse, status_code=status.HTTP_201_CREATED, summary="Upload a manuscript file")
async def upload_submission_file(
    file: UploadFile = File(...),
    file_type: SubmissionFileType = Form(SubmissionFileType.MANUSCRIPT),
    current_user: User = Depends(auth_service.validate_token),
    storage: StorageService = Depends(get_storage_service),
):
    """Stores the file in the private bucket; the returned path goes on the submission."""
    data = await file.read()
    path = storage.upload_submission_file(
        current_user.user_id, file_type.value, data, file.filename, file.content_type
    )
    logger.info(f"User {current_user.user_id} uploaded {file_type.value} file {path}")
    return FileUploadResponse(path=path, file_type=file_type)


@router.get("/{submission_id}", response_model=Submission, summary="Get a submission")
async def get_submission(
    submission_id: int,
    current_user: User = Depends(auth_service.validate_token),
    service: SubmissionService = Depends(get_submission_service),
):
    return await service.get_for_user(submission_id, current_user)


@router.put("/{submission_id}", response_model=Submission, summary="Update a submission")
async def update_submission(
    submission_id: int,
    body: SubmissionUpdate,
    current_user: User = Depends(auth_service.validate_token),
    service: SubmissionService = Depends(get_submission_service),
):
    return await service.update(submission_id, current_user, body)


@router.get(
    "/{submission_id}/files/{file_type}/url",
    response_model=SignedUrlResponse,
    summary="Time-limited download link",
)
async def get_file_url(
    submission_id: int,
    file_type: SubmissionFileType,
    current_user: User = Depends(auth_service.validate_token),
    service: SubmissionService = Depends(get_submission_service),
    storage: StorageService = Depends(get_storage_service),
):
    """Available to the author, admins and reviewers assigned to the submission."""
    path = await service.get_file_path(submission_id, file_type, current_user)
    return SignedUrlResponse(
        url=storage.manuscript_signed_url(path),
        expires_in=settings.SIGNED_URL_EXPIRES_SECONDS,
    )


@router.get("/{submission_id}/reviews", response_model=ReviewList, summary="Reviews of a submission")
async def list_submission_reviews(
    submission_id: int,
    current_user: User = Depends(auth_service.require_admin),
    service: SubmissionService = Depends(get_submission_service),
    reviews: ReviewService = Depends(get_review_service),
):
    await service.get_submission(submission_id)
    items = await reviews.list_for_submission(submission_id)
    return ReviewList(reviews=items, total=len(items))
