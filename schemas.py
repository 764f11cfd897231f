"""
Database Schemas for the Medicine Donation Platform

MongoDB collections are defined below using Pydantic models. Each class name is
converted to lowercase for the collection name (User -> "user").

We will use these collections:
- user: registered donors and recipients
- medicine: donated medicine listings
- feedback: ratings users leave on each other
"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class User(BaseModel):
    name: str
    email: str = Field(..., description="Unique, compared exactly as stored")
    password: str = Field(..., description="BCrypt hash of password")
    address: str
    phone: str


class Medicine(BaseModel):
    medicinename: str = Field(..., min_length=1)
    exp_date: datetime
    address: str = Field(..., min_length=1)
    phone: str = Field(..., min_length=1)
    photo: str = Field(..., min_length=1, description="URL or path of the photo")
    description: str = Field(..., min_length=1)


class Feedback(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    userId: Optional[str] = Field(None, description="User leaving the rating")
    ratedUserId: Optional[str] = Field(None, description="User being rated")
    rating: Any = None
