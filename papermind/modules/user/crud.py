"""CRUD operations for user profiles using FastCRUD."""

from fastcrud import FastCRUD

from .models import User

user_crud: FastCRUD = FastCRUD(User)
