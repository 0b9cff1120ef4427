"""Group: details and settings (name, budgets, default currency and split)."""
import re

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from household.auth import SessionContext, get_session_context
from household.database import get_db
from household.models import Group
from household.schemas import (
    CURRENCIES,
    GroupMetadata,
    GroupMetadataUpdate,
    GroupResponse,
    MemberInfo,
)
from household.services.split_validation import check_percentages

BUDGET_NAME_RE = re.compile(r"^[a-zA-Z0-9\s\-_]+$")

router = APIRouter(prefix="/group", tags=["group"])


def _group_response(group: Group) -> GroupResponse:
    return GroupResponse(
        id=group.id,
        name=group.name,
        budgets=group.budgets or [],
        member_ids=group.member_ids,
        members=[MemberInfo.model_validate(u) for u in group.members],
        metadata=GroupMetadata.model_validate(group.group_metadata or {}),
    )


@router.get("/details", response_model=GroupResponse)
def get_group(context: SessionContext = Depends(get_session_context)):
    return _group_response(context.group)


@router.post("/metadata", response_model=GroupResponse)
def update_group(
    data: GroupMetadataUpdate,
    db: Session = Depends(get_db),
    context: SessionContext = Depends(get_session_context),
):
    if (
        data.name is None
        and data.budgets is None
        and data.default_currency is None
        and data.default_share is None
    ):
        raise HTTPException(status_code=400, detail="No changes provided")

    group = context.group
    metadata = GroupMetadata.model_validate(group.group_metadata or {})

    if data.name is not None:
        name = data.name.strip()
        if not name:
            raise HTTPException(status_code=400, detail="Group name cannot be empty")
        group.name = name

    if data.budgets is not None:
        for budget in data.budgets:
            if not BUDGET_NAME_RE.match(budget):
                raise HTTPException(
                    status_code=400,
                    detail="Budget names can only contain letters, numbers, spaces, hyphens, and underscores",
                )
        group.budgets = list(dict.fromkeys(data.budgets))

    if data.default_currency is not None:
        if data.default_currency not in CURRENCIES:
            raise HTTPException(status_code=400, detail="Invalid currency")
        metadata.default_currency = data.default_currency

    if data.default_share is not None:
        # Default shares seed the split form, so they obey the same rules as a split.
        check_percentages(data.default_share, context.member_ids)
        metadata.default_share = data.default_share

    group.group_metadata = metadata.model_dump(mode="json")
    db.commit()
    db.refresh(group)
    return _group_response(group)
