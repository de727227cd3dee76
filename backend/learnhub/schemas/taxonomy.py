"""Category and tag request/response schemas."""

from typing import Optional

from pydantic import BaseModel


class CategoryCreate(BaseModel):
    name: str
    description: Optional[str] = None


class CategoryResponse(BaseModel):
    id: str
    name: str
    description: Optional[str] = None

    class Config:
        from_attributes = True


class TagCreate(BaseModel):
    name: str


class TagResponse(BaseModel):
    id: str
    name: str

    class Config:
        from_attributes = True
