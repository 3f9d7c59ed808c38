# backend/models/job.py

from datetime import datetime, date
from sqlalchemy import event
from .base import db
from services.measurements import area_sqft

class Job(db.Model):
    __tablename__ = 'jobs'

    id = db.Column(db.Integer, primary_key=True)
    ref_number = db.Column(db.String(50), unique=True, nullable=False)
    subject = db.Column(db.String(255))
    job_detail = db.Column(db.Text)
    date = db.Column(db.Date, nullable=False, default=date.today)
    customer_id = db.Column(db.Integer, db.ForeignKey('customers.id'), nullable=False)
    work_location = db.Column(db.String(255))
    discount_percent = db.Column(db.Float, default=0)
    notes = db.Column(db.Text)
    terms_conditions = db.Column(db.Text)

    # Workflow dates: a document type exists once its date is set
    quotation_date = db.Column(db.Date, nullable=True)
    challan_date = db.Column(db.Date, nullable=True)
    bill_date = db.Column(db.Date, nullable=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    items = db.relationship('JobItem', backref='job', order_by='JobItem.serial_number',
                            cascade="all, delete-orphan")


class JobItem(db.Model):
    __tablename__ = 'job_items'

    id = db.Column(db.Integer, primary_key=True)
    job_id = db.Column(db.Integer, db.ForeignKey('jobs.id'), nullable=False)
    serial_number = db.Column(db.Integer, nullable=False, default=1)
    work_description = db.Column(db.Text, nullable=False)
    details = db.Column(db.Text)
    unit = db.Column(db.String(20), default='pcs')
    quantity = db.Column(db.Float, default=0)
    unit_price = db.Column(db.Float, default=0)
    buy_price = db.Column(db.Float, default=0)
    discount_percent = db.Column(db.Float, default=0)
    vat_rate = db.Column(db.Float, default=0)

    # Single auto-calculated area used when no itemized measurements exist
    auto_calculate_sqft = db.Column(db.Boolean, default=False)
    calculated_sqft = db.Column(db.Float, nullable=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    measurements = db.relationship('Measurement', backref='job_item', order_by='Measurement.sort_order',
                                   cascade="all, delete-orphan")


class Measurement(db.Model):
    __tablename__ = 'measurements'

    id = db.Column(db.Integer, primary_key=True)
    job_item_id = db.Column(db.Integer, db.ForeignKey('job_items.id'), nullable=False)
    width_feet = db.Column(db.Integer, default=0, nullable=False)
    width_inches = db.Column(db.Integer, default=0, nullable=False)
    height_feet = db.Column(db.Integer, default=0, nullable=False)
    height_inches = db.Column(db.Integer, default=0, nullable=False)
    quantity = db.Column(db.Integer, default=1, nullable=False)
    calculated_sqft = db.Column(db.Float, default=0)
    description = db.Column(db.String(255))
    sort_order = db.Column(db.Integer, default=0)

    def refresh_area(self):
        self.calculated_sqft = area_sqft(
            self.width_feet or 0, self.width_inches or 0,
            self.height_feet or 0, self.height_inches or 0,
            self.quantity if self.quantity is not None else 1,
        )
        return self.calculated_sqft


@event.listens_for(Measurement, 'before_insert')
@event.listens_for(Measurement, 'before_update')
def _refresh_measurement_area(mapper, connection, target):
    target.refresh_area()
