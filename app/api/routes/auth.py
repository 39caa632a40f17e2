"""
Authentication Routes
Handles login, registration, and token management
"""
from fastapi import APIRouter, HTTPException, Depends, status
from fastapi.security import OAuth2PasswordBearer, OAuth2PasswordRequestForm
from pydantic import BaseModel, Field
from datetime import datetime, timedelta
from jose import JWTError, jwt
from passlib.context import CryptContext
from typing import Optional

from app.config import settings
from app.exceptions import PermissionDeniedError
from app.models.profile import Profile, ProfileCreate, ProfileResponse, UserRole, STAFF_ROLES, normalize_email


router = APIRouter()

# Password hashing
# Note: Using pbkdf2_sha256 as primary for better compatibility across Python versions
pwd_context = CryptContext(schemes=["pbkdf2_sha256", "bcrypt"], deprecated="auto")

# OAuth2 scheme
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login")


class Token(BaseModel):
    """Token response"""
    access_token: str
    token_type: str
    expires_in: int


class ChangePasswordRequest(BaseModel):
    """Password change request"""
    old_password: str
    new_password: str = Field(..., min_length=6)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify password against hash"""
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """Hash password"""
    return pwd_context.hash(password)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create JWT access token"""
    to_encode = data.copy()

    if expires_delta:
        expire = datetime.utcnow() + expires_delta
    else:
        expire = datetime.utcnow() + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    to_encode.update({"exp": expire})
    encoded_jwt = jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)

    return encoded_jwt


def token_for(profile: Profile) -> dict:
    """Token response body for a profile"""
    access_token = create_access_token(
        data={"sub": profile.email, "role": profile.role.value},
        expires_delta=timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    return {
        "access_token": access_token,
        "token_type": "bearer",
        "expires_in": settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60
    }


async def profile_from_token(token: str) -> Optional[Profile]:
    """Resolve a bearer token to an active profile, or None"""
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        return None

    email = payload.get("sub")
    if email is None:
        return None

    profile = await Profile.find_one(Profile.email == normalize_email(email))
    if profile is None or not profile.is_active:
        return None
    return profile


async def get_current_user(token: str = Depends(oauth2_scheme)) -> Profile:
    """Get current authenticated profile"""
    profile = await profile_from_token(token)
    if profile is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return profile


async def require_staff(current_user: Profile = Depends(get_current_user)) -> Profile:
    """Admin suite access: admins and managers only"""
    if current_user.role not in STAFF_ROLES:
        raise PermissionDeniedError("Only admins and managers can access the admin suite")
    return current_user


@router.post("/register", response_model=Token, status_code=status.HTTP_201_CREATED)
async def register(request: ProfileCreate):
    """
    Register a new staff account (always as employee)
    """
    existing = await Profile.find_one(Profile.email == request.email)
    if existing:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email already registered"
        )

    profile = Profile(
        email=request.email,
        name=request.name,
        department=request.department,
        role=UserRole.EMPLOYEE,
        password_hash=get_password_hash(request.password),
    )
    await profile.insert()

    return token_for(profile)


@router.post("/login", response_model=Token)
async def login(form_data: OAuth2PasswordRequestForm = Depends()):
    """
    Login with email and password
    """
    # username field contains email
    profile = await Profile.find_one(Profile.email == normalize_email(form_data.username))

    if not profile or not verify_password(form_data.password, profile.password_hash):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not profile.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is inactive"
        )

    profile.last_login = datetime.utcnow()
    await profile.save()

    return token_for(profile)


@router.get("/me", response_model=ProfileResponse)
async def get_me(current_user: Profile = Depends(get_current_user)):
    """
    Get current authenticated profile
    """
    return ProfileResponse.from_document(current_user)


@router.post("/change-password")
async def change_password(
    request: ChangePasswordRequest,
    current_user: Profile = Depends(get_current_user)
):
    """
    Change password
    """
    if not verify_password(request.old_password, current_user.password_hash):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Incorrect old password"
        )

    current_user.password_hash = get_password_hash(request.new_password)
    current_user.updated_at = datetime.utcnow()
    await current_user.save()

    return {"message": "Password changed successfully"}
