from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from .. import auth, crud
from ..config import Settings
from ..database import get_db
from ..errors import NotFound
from ..schemas import LoginIn, MessageOut, RegisterIn, TokenOut, UserOut

router = APIRouter(prefix="/api/users", tags=["users"])


@router.post("/register", response_model=MessageOut, status_code=status.HTTP_201_CREATED)
def register(data: RegisterIn, db: Session = Depends(get_db)):
    auth.register_user(db, name=data.name, email=data.email, password=data.password)
    return {"message": "User registered successfully"}


@router.post("/login", response_model=TokenOut)
def login(
    data: LoginIn,
    db: Session = Depends(get_db),
    settings: Settings = Depends(auth.get_app_settings),
):
    token = auth.login(db, email=data.email, password=data.password, settings=settings)
    return {"message": "Logged in successfully", "token": token}


@router.get("/me", response_model=UserOut)
def me(db: Session = Depends(get_db), user_id: int = Depends(auth.get_token_user_id)):
    user = crud.get_user(db, user_id)
    if user is None:
        raise NotFound("User not found")
    return user
