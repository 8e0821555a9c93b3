# cuaderno/routers/programs.py
"""
Programs (degrees / courses of study) and the subjects inside them.
Every route is scoped to the signed-in user.
"""
from __future__ import annotations
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from cuaderno.database import get_db
from cuaderno.deps import get_current_user
from cuaderno.models.user import User
from cuaderno.repositories.program import ProgramRepository, SubjectRepository
from cuaderno.schemas.program import (
    ProgramCreate, ProgramUpdate, ProgramResponse,
    SubjectCreate, SubjectUpdate, SubjectResponse,
)

router = APIRouter(tags=["library"])

# ----- DI providers -----
def get_program_repo() -> ProgramRepository:
    return ProgramRepository()

def get_subject_repo() -> SubjectRepository:
    return SubjectRepository()

def _not_found(what: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"{what} not found")

# ----- Programs -----
@router.get("/programs", response_model=List[ProgramResponse], summary="List programs (newest first)")
def list_programs(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    repo: ProgramRepository = Depends(get_program_repo),
):
    return [ProgramResponse.model_validate(p) for p in repo.list_for_user(db, user.id)]

@router.post("/programs", response_model=ProgramResponse, status_code=status.HTTP_201_CREATED)
def create_program(
    payload: ProgramCreate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    repo: ProgramRepository = Depends(get_program_repo),
):
    return ProgramResponse.model_validate(repo.create_owned(db, user.id, payload))

@router.get("/programs/{program_id}", response_model=ProgramResponse)
def get_program(
    program_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    repo: ProgramRepository = Depends(get_program_repo),
):
    program = repo.get_owned(db, user.id, program_id)
    if not program:
        raise _not_found("Program")
    return ProgramResponse.model_validate(program)

@router.patch("/programs/{program_id}", response_model=ProgramResponse)
def update_program(
    program_id: int,
    payload: ProgramUpdate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    repo: ProgramRepository = Depends(get_program_repo),
):
    program = repo.update_owned(db, user.id, program_id, payload)
    if not program:
        raise _not_found("Program")
    return ProgramResponse.model_validate(program)

@router.delete("/programs/{program_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_program(
    program_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    repo: ProgramRepository = Depends(get_program_repo),
):
    if not repo.delete_owned(db, user.id, program_id):
        raise _not_found("Program")
    return

# ----- Subjects -----
@router.get("/subjects", response_model=List[SubjectResponse], summary="List subjects, optionally for one program")
def list_subjects(
    program_id: Optional[int] = Query(None, ge=1),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    repo: SubjectRepository = Depends(get_subject_repo),
):
    return [SubjectResponse.model_validate(s) for s in repo.list_for_user(db, user.id, program_id=program_id)]

@router.post("/subjects", response_model=SubjectResponse, status_code=status.HTTP_201_CREATED)
def create_subject(
    payload: SubjectCreate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    repo: SubjectRepository = Depends(get_subject_repo),
    programs: ProgramRepository = Depends(get_program_repo),
):
    # Subjects can only be filed under the caller's own programs
    if not programs.get_owned(db, user.id, payload.program_id):
        raise _not_found("Program")
    return SubjectResponse.model_validate(repo.create_owned(db, user.id, payload))

@router.get("/subjects/{subject_id}", response_model=SubjectResponse)
def get_subject(
    subject_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    repo: SubjectRepository = Depends(get_subject_repo),
):
    subject = repo.get_owned(db, user.id, subject_id)
    if not subject:
        raise _not_found("Subject")
    return SubjectResponse.model_validate(subject)

@router.patch("/subjects/{subject_id}", response_model=SubjectResponse)
def update_subject(
    subject_id: int,
    payload: SubjectUpdate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    repo: SubjectRepository = Depends(get_subject_repo),
):
    subject = repo.update_owned(db, user.id, subject_id, payload)
    if not subject:
        raise _not_found("Subject")
    return SubjectResponse.model_validate(subject)

@router.delete("/subjects/{subject_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_subject(
    subject_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    repo: SubjectRepository = Depends(get_subject_repo),
):
    if not repo.delete_owned(db, user.id, subject_id):
        raise _not_found("Subject")
    return
