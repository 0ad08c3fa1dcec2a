# staff_directory/api/__init__.py
from fastapi import APIRouter

from staff_directory.api.auth.router import router as auth_router
from staff_directory.api.employees.router import router as employees_router

api_router = APIRouter()
api_router.include_router(auth_router, prefix="/auth", tags=["authentication"])
api_router.include_router(employees_router, prefix="/employees", tags=["employees"])
