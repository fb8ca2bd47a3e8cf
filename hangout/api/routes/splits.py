"""
hangout.api.routes.splits — Bill splits & settlement
=====================================================

All amounts are integer minor units (cents).
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from hangout.api.deps import get_engine, get_subject
from hangout.api.serializers import balance_dict, split_dict
from hangout.services import split_service

router = APIRouter(tags=["splits"])


class SplitCreate(BaseModel):
    name: str
    total_amount: int
    tax_amount: int = 0
    tip_amount: int = 0


class ItemCreate(BaseModel):
    name: str
    price: int
    quantity: int = 1


@router.get("/channels/{channel_id}/splits")
def get_splits(
    channel_id: int,
    subject: str | None = Depends(get_subject),
    engine=Depends(get_engine),
):
    splits = split_service.get_splits_by_channel(engine, subject, channel_id)
    return {"splits": [split_dict(s) for s in splits]}


@router.post("/channels/{channel_id}/splits", status_code=201)
def create_split(
    channel_id: int,
    body: SplitCreate,
    subject: str | None = Depends(get_subject),
    engine=Depends(get_engine),
):
    split = split_service.create_split(
        engine,
        subject,
        channel_id,
        body.name,
        body.total_amount,
        body.tax_amount,
        body.tip_amount,
    )
    return split_dict(split, with_items=False)


@router.post("/splits/{split_id}/items", status_code=201)
def add_item(
    split_id: int,
    body: ItemCreate,
    subject: str | None = Depends(get_subject),
    engine=Depends(get_engine),
):
    item = split_service.add_item(engine, subject, split_id, body.name, body.price, body.quantity)
    return {"id": item.id, "name": item.name, "price": item.price, "quantity": item.quantity}


@router.post("/split-items/{item_id}/claim")
def claim_item(
    item_id: int,
    subject: str | None = Depends(get_subject),
    engine=Depends(get_engine),
):
    return {"claimed": split_service.claim_item(engine, subject, item_id)}


@router.delete("/split-items/{item_id}/claim", status_code=204)
def unclaim_item(
    item_id: int,
    subject: str | None = Depends(get_subject),
    engine=Depends(get_engine),
):
    split_service.unclaim_item(engine, subject, item_id)
    return None


@router.post("/channels/{channel_id}/settlement")
def calculate_settlement(
    channel_id: int,
    subject: str | None = Depends(get_subject),
    engine=Depends(get_engine),
):
    balances = split_service.calculate_settlement(engine, subject, channel_id)
    return {"balances": [balance_dict(b) for b in balances]}


@router.get("/channels/{channel_id}/balances")
def get_balances(
    channel_id: int,
    subject: str | None = Depends(get_subject),
    engine=Depends(get_engine),
):
    balances = split_service.get_balances_by_channel(engine, subject, channel_id)
    return {"balances": [balance_dict(b) for b in balances]}


@router.post("/balances/{balance_id}/paid")
def mark_paid(
    balance_id: int,
    subject: str | None = Depends(get_subject),
    engine=Depends(get_engine),
):
    return balance_dict(split_service.mark_paid(engine, subject, balance_id))


@router.post("/splits/{split_id}/settle")
def settle_split(
    split_id: int,
    subject: str | None = Depends(get_subject),
    engine=Depends(get_engine),
):
    split = split_service.settle_split(engine, subject, split_id)
    return split_dict(split, with_items=False)
