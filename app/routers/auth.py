from fastapi import APIRouter, HTTPException, Depends, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.user import User
from app.schemas import ApiResponse, Token, UserLogin, UserOut
from app.utils.auth import get_current_user
from app.utils.security import verify_password, create_access_token

router = APIRouter()

@router.post("/login", response_model=ApiResponse[Token])
def login(user: UserLogin, db: Session = Depends(get_db)):
    db_user = db.query(User).filter(User.email == user.email).first()
    if not db_user or not verify_password(user.password, db_user.hashed_password):
        raise HTTPException(status_code=400, detail="Invalid credentials")

    if not db_user.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Account has been deactivated. Please contact administrator.",
        )

    token = create_access_token(data={"sub": db_user.email, "role": db_user.role})
    return {
        "success": True,
        "data": {
            "access_token": token,
            "token_type": "bearer",
            "user": db_user,
        },
    }

@router.get("/me", response_model=ApiResponse[UserOut])
def get_me(current_user: User = Depends(get_current_user)):
    """Get current user information"""
    return {"success": True, "data": current_user}
