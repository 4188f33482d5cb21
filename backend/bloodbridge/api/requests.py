"""Blood request API endpoints."""
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from bloodbridge.api.deps import ensure_authorized, get_current_user, get_db, get_geocoder
from bloodbridge.constants import BloodType, RequestStatus, UrgencyLevel
from bloodbridge.models.blood_request import BloodRequest
from bloodbridge.models.hospital import Hospital
from bloodbridge.models.user import User
from bloodbridge.schemas.request import (
    BloodRequestCreate,
    BloodRequestResponse,
    DonorResponseItem,
    RequestClose,
    RequestRespond,
    RequestStatusUpdate,
    RequestUnitsUpdate,
)
from bloodbridge.services import policy
from bloodbridge.services.donors import get_donor_for_user
from bloodbridge.services.geocoding import Geocoder
from bloodbridge.services.requests import (
    close_request,
    create_request,
    is_expired,
    record_units,
    respond_to_request,
    update_status,
)

router = APIRouter(prefix="/requests", tags=["requests"])


def _get_request_or_404(db: Session, request_id: str) -> BloodRequest:
    blood_request = db.query(BloodRequest).filter(BloodRequest.id == request_id).first()
    if not blood_request:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Blood request not found",
        )
    return blood_request


def _to_response(blood_request: BloodRequest, donors_notified: int | None = None) -> BloodRequestResponse:
    return BloodRequestResponse(
        id=blood_request.id,
        requester_id=blood_request.requester_id,
        request_type=blood_request.request_type,
        hospital_id=blood_request.hospital_id,
        patient_name=blood_request.patient_name,
        blood_type=blood_request.blood_type,
        units_needed=blood_request.units_needed,
        units_received=blood_request.units_received or 0,
        urgency=blood_request.urgency,
        address=blood_request.address,
        city=blood_request.city,
        state=blood_request.state,
        zipcode=blood_request.zipcode,
        latitude=blood_request.latitude,
        longitude=blood_request.longitude,
        formatted_address=blood_request.formatted_address,
        contact_name=blood_request.contact_name,
        contact_number=blood_request.contact_number,
        additional_info=blood_request.additional_info,
        notes=blood_request.notes,
        status=blood_request.status,
        expires_at=blood_request.expires_at,
        is_expired=is_expired(blood_request),
        closed_at=blood_request.closed_at,
        created_at=blood_request.created_at,
        responses=[DonorResponseItem.model_validate(r) for r in blood_request.responses],
        donors_notified=donors_notified,
    )


@router.post("", response_model=BloodRequestResponse, status_code=status.HTTP_201_CREATED)
def create_blood_request(
    request_data: BloodRequestCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    geocoder: Geocoder = Depends(get_geocoder),
):
    """Open a blood request and notify compatible donors nearby."""
    if request_data.hospital_id:
        hospital = db.query(Hospital).filter(Hospital.id == request_data.hospital_id).first()
        if not hospital:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Hospital not found",
            )

    blood_request, notified = create_request(
        db,
        current_user,
        request_data.model_dump(mode="json"),
        geocoder,
    )
    return _to_response(blood_request, donors_notified=notified)


@router.get("", response_model=list[BloodRequestResponse])
def list_blood_requests(
    status_filter: RequestStatus | None = Query(None, alias="status"),
    blood_type: BloodType | None = Query(None),
    urgency: UrgencyLevel | None = Query(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """List blood requests, newest first, with optional filters."""
    query = db.query(BloodRequest)
    if status_filter:
        query = query.filter(BloodRequest.status == status_filter.value)
    if blood_type:
        query = query.filter(BloodRequest.blood_type == blood_type.value)
    if urgency:
        query = query.filter(BloodRequest.urgency == urgency.value)

    requests = query.order_by(BloodRequest.created_at.desc()).all()
    return [_to_response(r) for r in requests]


@router.get("/{request_id}", response_model=BloodRequestResponse)
def get_blood_request(
    request_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Get a blood request by ID."""
    return _to_response(_get_request_or_404(db, request_id))


@router.patch("/{request_id}/status", response_model=BloodRequestResponse)
def update_blood_request_status(
    request_id: str,
    status_data: RequestStatusUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Set a request's status (requester or admin)."""
    blood_request = _get_request_or_404(db, request_id)
    ensure_authorized(
        current_user,
        policy.UPDATE_REQUEST_STATUS,
        blood_request,
        detail="Not authorized to update this request",
    )
    return _to_response(update_status(db, blood_request, status_data.status.value))


@router.patch("/{request_id}/units", response_model=BloodRequestResponse)
def update_blood_request_units(
    request_id: str,
    units_data: RequestUnitsUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Record units received; status follows (partial/fulfilled)."""
    blood_request = _get_request_or_404(db, request_id)
    ensure_authorized(
        current_user,
        policy.UPDATE_REQUEST_UNITS,
        blood_request,
        detail="Not authorized to update this request",
    )
    return _to_response(record_units(db, blood_request, units_data.units_received))


@router.post("/{request_id}/respond", response_model=BloodRequestResponse)
def respond_to_blood_request(
    request_id: str,
    respond_data: RequestRespond,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Accept or decline a request as the current donor."""
    blood_request = _get_request_or_404(db, request_id)

    donor = get_donor_for_user(db, current_user.id)
    if not donor:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Donor profile not found",
        )

    return _to_response(respond_to_request(db, blood_request, donor, respond_data.response))


@router.patch("/{request_id}/close", response_model=BloodRequestResponse)
def close_blood_request(
    request_id: str,
    close_data: RequestClose,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Close a request as fulfilled or cancelled and notify accepted donors."""
    blood_request = _get_request_or_404(db, request_id)
    ensure_authorized(
        current_user,
        policy.CLOSE_REQUEST,
        blood_request,
        detail="Not authorized to close this request",
    )

    blood_request, notified = close_request(db, blood_request, close_data.status, close_data.notes)
    return _to_response(blood_request, donors_notified=notified)
