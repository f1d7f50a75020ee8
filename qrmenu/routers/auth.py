from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.orm import Session
from qrmenu.schemas.common import Token
from qrmenu.util.security import create_token, verify_pw
from qrmenu.models.core import Owner
from qrmenu.db import get_db

router = APIRouter(prefix="/auth", tags=["auth"])

@router.post("/login", response_model=Token)
def login(email: str, password: str, db: Session = Depends(get_db)):
    owner = db.execute(select(Owner).where(Owner.email == email.strip().lower())).scalar_one_or_none()
    if not owner or not owner.active or not verify_pw(owner.pass_hash, password):
        raise HTTPException(status_code=401, detail="Invalid credentials")
    return Token(access_token=create_token(owner.id))
