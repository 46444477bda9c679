"""
Reviewer application endpoints.

Anyone may apply; admins review applications in the admin console.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from exceptions import AppError
from models import ApplicationStatus, User
from schemas.reviewer_application import (
    ApplicationStatusResponse, ApplicationStatusUpdate, ReviewerApplication, ReviewerApplicationCreate,
)
from services import auth_service
from services.reviewer_application_service import (
    ReviewerApplicationService, get_reviewer_application_service,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/reviewer-applications", tags=["reviewer-applications"])


@router.post(
    "",
    response_model=ReviewerApplication,
    status_code=status.HTTP_201_CREATED,
    summary="Apply to become a reviewer",
)
async def submit_application(
    body: ReviewerApplicationCreate,
    applicant: Optional[User] = Depends(auth_service.get_optional_user),
    service: ReviewerApplicationService = Depends(get_reviewer_application_service),
):
    """Signed-in applicants are linked to their account."""
    try:
        return await service.submit(body, applicant.user_id if applicant else None)
    except (HTTPException, AppError):
        raise
    except Exception as e:
        logger.error(f"submit_application failed: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to submit application",
        )


@router.get("/mine", response_model=List[ReviewerApplication], summary="My applications")
async def list_my_applications(
    current_user: User = Depends(auth_service.validate_token),
    service: ReviewerApplicationService = Depends(get_reviewer_application_service),
):
    return await service.list_for_user(current_user.user_id)


@router.get("", response_model=List[ReviewerApplication], summary="List applications")
async def list_applications(
    status_filter: Optional[ApplicationStatus] = Query(None, alias="status"),
    current_user: User = Depends(auth_service.require_admin),
    service: ReviewerApplicationService = Depends(get_reviewer_application_service),
):
    return await service.list_applications(status_filter)


@router.put("/{application_id}/status", response_model=ApplicationStatusResponse, summary="Review an application")
async def update_application_status(
    application_id: int,
    body: ApplicationStatusUpdate,
    current_user: User = Depends(auth_service.require_admin),
    service: ReviewerApplicationService = Depends(get_reviewer_application_service),
):
    """Any status may follow any other; the reviewing admin and time are recorded."""
    application, message = await service.update_status(
        application_id, body.status, current_user.user_id, body.admin_notes
    )
    return ApplicationStatusResponse(
        application=ReviewerApplication.model_validate(application),
        message=message,
    )


@router.delete("/{application_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete an application")
async def delete_application(
    application_id: int,
    current_user: User = Depends(auth_service.require_admin),
    service: ReviewerApplicationService = Depends(get_reviewer_application_service),
):
    await service.delete(application_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
