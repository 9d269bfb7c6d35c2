from fastapi import APIRouter, Depends, status
from app.api.deps import get_user_service
from app.core.security import create_access_token
from app.schemas.user import UserCreate, UserLogin, TokenResponse, UserResponse
from app.services.user_service import UserService

router = APIRouter()


def _token_for(user) -> TokenResponse:
    access_token = create_access_token(data={"sub": str(user.id)})
    return TokenResponse(
        access_token=access_token,
        token_type="bearer",
        user=UserResponse.model_validate(user),
    )


@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
async def register(user_data: UserCreate, users: UserService = Depends(get_user_service)):
    """Create an account. New accounts are customers unless a valid admin code is given."""
    user = await users.register(
        fullname=user_data.fullname,
        email=user_data.email,
        password=user_data.password,
        admin_code=user_data.admin_code,
    )
    return _token_for(user)


@router.post("/login", response_model=TokenResponse)
async def login(credentials: UserLogin, users: UserService = Depends(get_user_service)):
    user = await users.authenticate(credentials.email, credentials.password)
    return _token_for(user)
