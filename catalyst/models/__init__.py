"""
AI Catalyst Workshop
Database models package.

The shared SQLAlchemy instance lives here so every model module and
service can do ``from catalyst.models import db``.
"""

from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()
