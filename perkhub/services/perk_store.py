"""
Persistence for perk records.

The store owns every query against the ``perks`` table and raises the
typed errors from ``perkhub.errors``; it never builds HTTP responses.
Uniqueness of ``(owner_id, title)`` is left to the database's unique
constraint: inserts and renames are attempted and an ``IntegrityError``
is turned into ``ConflictError`` after rolling back, so two concurrent
writers can never both succeed.
"""
from __future__ import annotations

import logging
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .. import models, schemas
from ..errors import ConflictError, Forbidden, NotFound

logger = logging.getLogger(__name__)


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _contains(column, value: str):
    # both sides go through the database lower(), so a value always matches itself
    pattern = f"%{_escape_like(value)}%"
    return func.lower(column).like(func.lower(pattern), escape="\\")


class PerkStore:
    def __init__(self, db: Session) -> None:
        self.db = db

    def _commit(self, title: str) -> None:
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            logger.info("perk title conflict: %r", title)
            raise ConflictError(f'You already have a perk titled "{title}"')

    def create(self, payload: schemas.PerkCreate, owner_id: int) -> models.Perk:
        perk = models.Perk(
            owner_id=owner_id,
            title=payload.title,
            description=payload.description,
            category=payload.category,
            merchant=payload.merchant,
            discount_percent=payload.discount_percent,
        )
        self.db.add(perk)
        self._commit(payload.title)
        self.db.refresh(perk)
        logger.info("perk %s created by user %s", perk.id, owner_id)
        return perk

    def get_by_id(self, perk_id: int) -> models.Perk:
        perk = self.db.get(models.Perk, perk_id)
        if perk is None:
            raise NotFound("Perk not found")
        return perk

    def _owned(self, perk_id: int, requester_id: int) -> models.Perk:
        perk = self.get_by_id(perk_id)
        if perk.owner_id != requester_id:
            raise Forbidden("Only the owner can change this perk")
        return perk

    def _filtered(self, flt: Optional[schemas.PerkFilter]):
        q = self.db.query(models.Perk)
        if flt is None:
            return q
        if flt.title:
            q = q.filter(_contains(models.Perk.title, flt.title))
        if flt.merchant:
            q = q.filter(_contains(models.Perk.merchant, flt.merchant))
        if flt.category:
            q = q.filter(func.lower(models.Perk.category) == flt.category.lower())
        return q

    def list(self, flt: Optional[schemas.PerkFilter] = None) -> List[models.Perk]:
        return self._filtered(flt).order_by(models.Perk.id.asc()).all()

    def count(self, flt: Optional[schemas.PerkFilter] = None) -> int:
        return self._filtered(flt).count()

    def list_by_owner(self, owner_id: int) -> List[models.Perk]:
        return (
            self.db.query(models.Perk)
            .filter(models.Perk.owner_id == owner_id)
            .order_by(models.Perk.id.asc())
            .all()
        )

    def list_merchants(self) -> List[str]:
        rows = (
            self.db.query(models.Perk.merchant)
            .distinct()
            .order_by(models.Perk.merchant.asc())
            .all()
        )
        return [r[0] for r in rows]

    def update(self, perk_id: int, changes: schemas.PerkUpdate, requester_id: int) -> models.Perk:
        perk = self._owned(perk_id, requester_id)
        for field, value in changes.model_dump(exclude_unset=True, exclude_none=True).items():
            setattr(perk, field, value)
        self._commit(perk.title)
        self.db.refresh(perk)
        logger.info("perk %s updated by user %s", perk_id, requester_id)
        return perk

    def delete_by_id(self, perk_id: int, requester_id: int) -> None:
        perk = self._owned(perk_id, requester_id)
        self.db.delete(perk)
        self.db.commit()
        logger.info("perk %s deleted by user %s", perk_id, requester_id)
