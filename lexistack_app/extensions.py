"""Application-wide extensions.

Extension instances live here so blueprints and services can import them
without circular imports.
"""

from flask_apscheduler import APScheduler
from flask_login import LoginManager
from flask_wtf import CSRFProtect

from .db_instance import db

login_manager = LoginManager()
login_manager.login_view = "auth.login"

csrf_protect = CSRFProtect()
scheduler = APScheduler()

__all__ = ["db", "login_manager", "csrf_protect", "scheduler"]
