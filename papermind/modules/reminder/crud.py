"""CRUD operations for reminders using FastCRUD."""

from fastcrud import FastCRUD

from .models import Reminder

reminder_crud: FastCRUD = FastCRUD(Reminder)
