# backend/models/customer.py

from .base import db
from datetime import datetime

class Customer(db.Model):
    __tablename__ = 'customers'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(150), nullable=False)
    contact_person = db.Column(db.String(100))
    email = db.Column(db.String(100))
    phone = db.Column(db.String(30))
    address = db.Column(db.String(255))  # Legacy single-line address
    address_line1 = db.Column(db.String(255))  # House/Road/Area
    address_line2 = db.Column(db.String(255))  # City/District
    location = db.Column(db.String(150))
    vat_number = db.Column(db.String(50))
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    jobs = db.relationship('Job', backref='customer', lazy='dynamic')
