# backend/models/__init__.py

from .base import db

# Customer must be imported before Job for the relationship backref
from .customer import Customer
from .job import Job, JobItem, Measurement
from .setting import AppSetting

__all__ = [
    'db',
    'Customer',
    'Job',
    'JobItem',
    'Measurement',
    'AppSetting',
]
