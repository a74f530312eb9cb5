from typing import Dict, List

from fastapi import APIRouter, Depends, HTTPException, Request, status

from bunktrack.api.schemas import (
    CalculateRequest,
    ChartOut,
    StatsOut,
    SubjectCreate,
    SubjectOut,
    SubjectUpdate,
)
from bunktrack.core import AppSettings
from bunktrack.engine.attendance import AttendanceCalculator, InvalidInputError
from bunktrack.engine.chart import generate_graph
from bunktrack.engine.store import Subject, SubjectNotFoundError, SubjectStore
from bunktrack.engine.stream import app_logger


router = APIRouter()


def get_store(request: Request) -> SubjectStore:
    return request.app.state.store


def get_settings(request: Request) -> AppSettings:
    return request.app.state.settings


def _bad_request(error: InvalidInputError) -> HTTPException:
    app_logger.warning(f"Invalid input: {error}")
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(error))


def _not_found(error: SubjectNotFoundError) -> HTTPException:
    app_logger.warning(str(error))
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Subject not found")


def _unusable(error: InvalidInputError) -> HTTPException:
    app_logger.error(f"Stored subject has unusable figures: {error}")
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="Stored subject has unusable figures",
    )


def _subject_out(subject: Subject) -> SubjectOut:
    try:
        return SubjectOut.from_subject(subject)
    except InvalidInputError as error:
        raise _unusable(error)


@router.get("/healthcheck")
def healthcheck() -> Dict[str, str]:
    return {"message": "Service is healthy", "status": "ok"}


@router.get("/subjects", response_model=List[SubjectOut])
def list_subjects(store: SubjectStore = Depends(get_store)) -> List[SubjectOut]:
    try:
        subjects = store.list()
    except InvalidInputError as error:
        raise _unusable(error)

    return [_subject_out(subject) for subject in subjects]


@router.post("/subjects", response_model=SubjectOut, status_code=status.HTTP_201_CREATED)
def create_subject(
    payload: SubjectCreate,
    store: SubjectStore = Depends(get_store),
    settings: AppSettings = Depends(get_settings),
) -> SubjectOut:
    required_percent = payload.required_percent
    if required_percent is None:
        required_percent = settings.DEFAULT_REQUIRED_PERCENT

    try:
        subject = store.create(
            subject_name=payload.subject_name,
            total=payload.total,
            attended=payload.attended,
            required_percent=required_percent,
        )
    except InvalidInputError as error:
        raise _bad_request(error)

    return _subject_out(subject)


# Registered before /subjects/{subject_id} so "chart" is not taken as an id
@router.get("/subjects/chart", response_model=ChartOut)
def subjects_chart(store: SubjectStore = Depends(get_store)) -> ChartOut:
    try:
        subjects = store.list()
    except InvalidInputError as error:
        raise _unusable(error)

    return ChartOut(graph=generate_graph(subjects))


@router.get("/subjects/{subject_id}", response_model=SubjectOut)
def get_subject(subject_id: str, store: SubjectStore = Depends(get_store)) -> SubjectOut:
    try:
        subject = store.get(subject_id)
    except SubjectNotFoundError as error:
        raise _not_found(error)
    except InvalidInputError as error:
        raise _unusable(error)

    return _subject_out(subject)


@router.put("/subjects/{subject_id}", response_model=SubjectOut)
def update_subject(
    subject_id: str,
    payload: SubjectUpdate,
    store: SubjectStore = Depends(get_store),
) -> SubjectOut:
    try:
        subject = store.update(
            subject_id,
            subject_name=payload.subject_name,
            total=payload.total,
            attended=payload.attended,
            required_percent=payload.required_percent,
        )
    except SubjectNotFoundError as error:
        raise _not_found(error)
    except InvalidInputError as error:
        raise _bad_request(error)

    return _subject_out(subject)


@router.delete("/subjects/{subject_id}")
def delete_subject(subject_id: str, store: SubjectStore = Depends(get_store)) -> Dict[str, str]:
    try:
        store.delete(subject_id)
    except SubjectNotFoundError as error:
        raise _not_found(error)

    return {"message": "Deleted successfully"}


@router.post("/attendance/calculate", response_model=StatsOut)
def calculate_attendance(
    payload: CalculateRequest,
    settings: AppSettings = Depends(get_settings),
) -> StatsOut:
    required_percent = payload.required_percent
    if required_percent is None:
        required_percent = settings.DEFAULT_REQUIRED_PERCENT

    try:
        stats = AttendanceCalculator.compute(payload.attended, payload.total, required_percent)
    except InvalidInputError as error:
        raise _bad_request(error)

    return StatsOut.from_stats(stats)
