import logging
from contextlib import asynccontextmanager
from datetime import date, datetime
from typing import Any, Dict, Optional, Union

from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError
from pydantic import BaseModel, ConfigDict
from pymongo.database import Database

import database
import stores
from auth import create_access_token, decode_access_token, verify_password
from config import load_settings
from database import get_db, sanitize
from exceptions import (
    ApiError,
    NotFound,
    Unauthorized,
    ValidationError,
    api_error_handler,
    internal_error,
    request_validation_handler,
)

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("meddonate")


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = load_settings()
    client, db = database.connect(settings.db_uri)
    app.state.settings = settings
    app.state.db = db
    try:
        yield
    finally:
        app.state.db = None
        client.close()
        logger.info("MongoDB connection closed")


# App and CORS
app = FastAPI(title="Medicine Donation API", lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_exception_handler(ApiError, api_error_handler)
app.add_exception_handler(RequestValidationError, request_validation_handler)

router = APIRouter(prefix="/api")
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/login", auto_error=False)


def get_current_user(request: Request, token: Optional[str] = Depends(oauth2_scheme), db: Database = Depends(get_db)):
    credentials_exception = Unauthorized("Could not validate credentials")
    if not token:
        raise Unauthorized("Not authenticated")
    try:
        user_id = decode_access_token(token, request.app.state.settings.token_secret)
    except JWTError:
        raise credentials_exception
    user = stores.find_user_by_id(db, user_id)
    if not user:
        raise credentials_exception
    user = sanitize(user)
    user.pop("password", None)
    return user


# Request/Response Models
class SignupRequest(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    name: str
    email: str
    password: str
    address: str
    phone: str

class LoginRequest(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    email: str
    password: str

class TokenResponse(BaseModel):
    token: str

class DonateRequest(BaseModel):
    # presence is checked in stores.create_listing
    model_config = ConfigDict(coerce_numbers_to_str=True)

    medicinename: Optional[str] = None
    exp_date: Optional[Union[datetime, date]] = None
    address: Optional[str] = None
    phone: Optional[str] = None
    photo: Optional[str] = None
    description: Optional[str] = None

class FeedbackRequest(BaseModel):
    userId: Any = None
    ratedUserId: Any = None
    rating: Any = None


def message(text: str, status_code: int = 200) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"message": text})


# Auth Routes
@router.post("/signup", status_code=201)
def signup(payload: SignupRequest, db: Database = Depends(get_db)):
    with internal_error("Server error", key="message"):
        stores.create_user(db, payload.name, payload.email, payload.password, payload.address, payload.phone)
    return message("User registered successfully", 201)

@router.post("/login", response_model=TokenResponse)
def login(payload: LoginRequest, request: Request, db: Database = Depends(get_db)):
    with internal_error("Server error", key="message"):
        user = stores.find_user_by_email(db, payload.email)
        if not user or not verify_password(payload.password, user.get("password", "")):
            raise ValidationError("Invalid credentials", key="message")
        token = create_access_token(str(user["_id"]), request.app.state.settings.token_secret)
    return TokenResponse(token=token)

@router.get("/me")
def me(current_user=Depends(get_current_user)):
    return current_user


# Medicine Routes
@router.post("/donate", status_code=201)
def donate(payload: DonateRequest, db: Database = Depends(get_db)):
    with internal_error("Failed to donate medicine"):
        stores.create_listing(db, payload.model_dump())
    return message("Medicine donated successfully", 201)

@router.get("/login/home")
def home(db: Database = Depends(get_db)):
    with internal_error("Failed to fetch donated medicines"):
        return stores.list_listings(db)

@router.get("/collect-medicine/{address}")
def collect_medicine(address: str, db: Database = Depends(get_db)):
    with internal_error("Failed to fetch donated medicines"):
        return stores.find_listings_by_address(db, address)

@router.delete("/delete/{medicinename}")
def delete_medicine(medicinename: str, db: Database = Depends(get_db)):
    with internal_error("Failed to delete medicine"):
        deleted = stores.delete_listing_by_name(db, medicinename)
    if not deleted:
        raise NotFound("Medicine not found")
    return message("Medicine deleted successfully")

@router.get("/request/{medicinename}")
def request_medicine(medicinename: str, db: Database = Depends(get_db)):
    with internal_error("Failed to request medicine"):
        medicine = stores.find_listing_by_name(db, medicinename)
    if not medicine:
        raise NotFound("Medicine not found")
    return medicine

@router.get("/autocomplete/{query}")
def autocomplete(query: str, db: Database = Depends(get_db)) -> Dict[str, Any]:
    with internal_error("Internal server error"):
        return {"suggestions": stores.search_listing_names(db, query)}


# Feedback Routes
@router.post("/feedback", status_code=201)
def submit_feedback(payload: FeedbackRequest, db: Database = Depends(get_db)):
    with internal_error("Error submitting feedback."):
        stores.submit_feedback(db, payload.userId, payload.ratedUserId, payload.rating)
    return message("Feedback submitted successfully.", 201)

@router.get("/api/feedback/{userId}")
def get_feedback(userId: str, db: Database = Depends(get_db)):
    with internal_error("Internal server error"):
        return stores.find_feedback_for_user(db, userId)


app.include_router(router)


# Utility endpoints
@app.get("/")
def root():
    return {"message": "Medicine Donation API running"}

@app.get("/test")
def test_database(request: Request):
    db = getattr(request.app.state, "db", None)
    if db is None:
        return {"backend": "ok", "database": "missing"}
    try:
        return {"backend": "ok", "database": "ok", "collections": db.list_collection_names()}
    except Exception as e:
        logger.warning("Database check failed: %s", e)
        return {"backend": "ok", "database": "error"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=load_settings().port)
