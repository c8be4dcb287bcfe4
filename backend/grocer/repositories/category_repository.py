"""
Category Repository - Data Access Layer for Categories
"""
from typing import List

from grocer.domain.category import Category, CategoryCreate
from grocer.repositories.base_repository import BaseRepository


class CategoryRepository(BaseRepository[Category]):
    table_name = "categories"
    model = Category

    def find_all(self) -> List[Category]:
        return self._all()

    def create(self, category_data: CategoryCreate) -> Category:
        return self._insert(**category_data.model_dump())
