from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from . import schemas
from .auth import get_current_user
from .db import get_db
from .models import User
from .services.perk_store import PerkStore

router = APIRouter()


def get_store(db: Session = Depends(get_db)) -> PerkStore:
    return PerkStore(db)


def summary_text(count: int, total: int) -> str:
    return f"Showing {count} of {total} perks"


@router.get("", response_model=schemas.PerkList)
def list_perks(
    title: Optional[str] = Query(None),
    merchant: Optional[str] = Query(None),
    category: Optional[str] = Query(None),
    store: PerkStore = Depends(get_store),
):
    flt = schemas.PerkFilter(title=title, merchant=merchant, category=category)
    perks = store.list(flt)
    total = store.count()
    return {
        "perks": perks,
        "count": len(perks),
        "total": total,
        "summary": summary_text(len(perks), total),
    }


@router.post("", response_model=schemas.PerkResult, status_code=status.HTTP_201_CREATED)
def create_perk(
    payload: schemas.PerkCreate,
    store: PerkStore = Depends(get_store),
    user: User = Depends(get_current_user),
):
    return {"perk": store.create(payload, owner_id=user.id)}


# static paths before /{perk_id}
@router.get("/merchants", response_model=schemas.MerchantList)
def list_merchants(store: PerkStore = Depends(get_store)):
    return {"merchants": store.list_merchants()}


@router.get("/mine", response_model=schemas.MyPerks)
def my_perks(
    store: PerkStore = Depends(get_store),
    user: User = Depends(get_current_user),
):
    perks = store.list_by_owner(user.id)
    return {"perks": perks, "count": len(perks)}


@router.get("/{perk_id}", response_model=schemas.PerkResult)
def get_perk(perk_id: int, store: PerkStore = Depends(get_store)):
    return {"perk": store.get_by_id(perk_id)}


@router.put("/{perk_id}", response_model=schemas.PerkResult)
def update_perk(
    perk_id: int,
    changes: schemas.PerkUpdate,
    store: PerkStore = Depends(get_store),
    user: User = Depends(get_current_user),
):
    return {"perk": store.update(perk_id, changes, requester_id=user.id)}


@router.delete("/{perk_id}", response_model=schemas.DeleteResult)
def delete_perk(
    perk_id: int,
    store: PerkStore = Depends(get_store),
    user: User = Depends(get_current_user),
):
    store.delete_by_id(perk_id, requester_id=user.id)
    return {"ok": True, "deleted_perk_id": perk_id}
