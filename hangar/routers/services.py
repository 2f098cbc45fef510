# hangar/routers/services.py
# PATCH = ALLOWED, DELETE = soft-delete (is_active)

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from ..database import get_db
from ..models import Services as DBServices
from ..schemas.services import (
    ServiceCreate,
    ServiceUpdate,
    ServiceRead,
)
from ..services.entity_saver import save_entity
from ..services.snapshot import get_business

router = APIRouter(prefix="/businesses/{business_id}/services", tags=["services"])


def _get_service(db: Session, business_id: str, id: str) -> DBServices:
    obj = db.get(DBServices, id)
    if not obj or obj.business_id != business_id:
        raise HTTPException(status_code=404, detail="Not found")
    return obj


@router.get("/", response_model=list[ServiceRead])
def list_services(
    business_id: str,
    include_inactive: bool = False,
    db: Session = Depends(get_db),
):
    get_business(db, business_id)
    query = db.query(DBServices).filter(DBServices.business_id == business_id)
    if not include_inactive:
        query = query.filter(DBServices.is_active == 1)
    return query.order_by(DBServices.name).all()


@router.get("/{id}", response_model=ServiceRead)
def get_service(business_id: str, id: str, db: Session = Depends(get_db)):
    return _get_service(db, business_id, id)


@router.post("/", response_model=ServiceRead, status_code=status.HTTP_201_CREATED)
def create_service(
    business_id: str,
    data: ServiceCreate,
    db: Session = Depends(get_db),
):
    get_business(db, business_id)
    return save_entity(db, DBServices, data.model_dump(), business_id=business_id)


@router.patch("/{id}", response_model=ServiceRead)
def update_service(
    business_id: str,
    id: str,
    data: ServiceUpdate,
    db: Session = Depends(get_db),
):
    obj = _get_service(db, business_id, id)
    return save_entity(
        db,
        DBServices,
        {"id": obj.id, **data.model_dump(exclude_unset=True)},
        business_id=business_id,
    )


@router.delete("/{id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_service(business_id: str, id: str, db: Session = Depends(get_db)):
    obj = _get_service(db, business_id, id)

    # Past appointments keep pointing at it
    obj.is_active = 0
    db.commit()
