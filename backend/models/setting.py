# backend/models/setting.py

import json
from datetime import datetime
from .base import db

class AppSetting(db.Model):
    """Key/value store for application-wide settings, values kept as JSON text"""
    __tablename__ = 'settings'

    id = db.Column(db.Integer, primary_key=True)
    key = db.Column(db.String(100), unique=True, nullable=False)
    value = db.Column(db.Text, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def get_value(self):
        try:
            return json.loads(self.value)
        except (TypeError, ValueError):
            return self.value

    def set_value(self, value):
        self.value = json.dumps(value)
