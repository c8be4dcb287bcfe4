"""
Category Domain Model
"""
from pydantic import BaseModel, Field, ConfigDict


class Category(BaseModel):
    """Product category shown in the storefront navigation"""

    id: int = Field(..., description="Category ID")
    name: str = Field(..., description="Unique category name")
    icon: str = Field(..., description="Icon class name")
    color_class: str = Field(..., description="CSS color classes")

    model_config = ConfigDict(from_attributes=True)

    def to_dict(self) -> dict:
        return self.model_dump()


class CategoryCreate(BaseModel):
    name: str = Field(..., min_length=1)
    icon: str
    color_class: str
