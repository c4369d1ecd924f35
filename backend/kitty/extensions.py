"""
extensions.py — Flask extension singletons.

SQLAlchemy and marshmallow are created here without an app and bound inside
the factory with init_app(), so tests can build isolated app instances.

    from backend.kitty.extensions import db, ma

Validation schemas in schemas/ inherit from marshmallow.Schema, not ma.Schema:
ma.Schema needs an application context, and the unit suite runs without one.
"""

from flask_marshmallow import Marshmallow
from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()
ma = Marshmallow()
