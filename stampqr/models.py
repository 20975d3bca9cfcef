from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import func
import time, os, secrets


def _gen_bigint_id():
    """Generate a sortable 64-bit int: millis timestamp << 16 | 16 bits randomness."""
    return (int(time.time() * 1000) << 16) | int.from_bytes(os.urandom(2), 'big')


def new_id(prefix: str) -> str:
    return f"{prefix}_{secrets.token_hex(8)}"


db = SQLAlchemy()

SOURCE_QR_SCAN = 'qr_scan'
SOURCE_MANUAL = 'manual'
SOURCE_PROMOTION = 'promotion'


class Business(db.Model):
    id = db.Column(db.String(64), primary_key=True, default=lambda: new_id('biz'))
    name = db.Column(db.String(255), nullable=False)
    email = db.Column(db.String(255), unique=True)
    created_at = db.Column(db.DateTime(timezone=True), server_default=func.now())


class Customer(db.Model):
    id = db.Column(db.String(64), primary_key=True, default=lambda: new_id('cust'))
    business_id = db.Column(db.String(64), db.ForeignKey('business.id'), nullable=False, index=True)
    phone = db.Column(db.String(32))
    first_name = db.Column(db.String(100))
    last_name = db.Column(db.String(100))
    # balance, written only by RedemptionLedger
    total_stamps = db.Column(db.Integer, nullable=False, default=0)
    total_visits = db.Column(db.Integer, nullable=False, default=0)
    last_visit = db.Column(db.DateTime(timezone=True))
    created_at = db.Column(db.DateTime(timezone=True), server_default=func.now())

    def balance(self) -> dict:
        return {
            'customer_id': self.id,
            'total_stamps': self.total_stamps,
            'total_visits': self.total_visits,
            'last_visit': self.last_visit.isoformat() if self.last_visit else None,
        }


class StampTransaction(db.Model):
    """Append-only redemption record. One row per consumed redemption id."""
    id = db.Column(db.BigInteger, primary_key=True, default=_gen_bigint_id)
    redemption_id = db.Column(db.String(64), nullable=False, unique=True, index=True)
    business_id = db.Column(db.String(64), db.ForeignKey('business.id'), nullable=False, index=True)
    customer_id = db.Column(db.String(64), db.ForeignKey('customer.id'), nullable=False, index=True)
    stamps_awarded = db.Column(db.Integer, nullable=False)
    source = db.Column(db.String(16), nullable=False, default=SOURCE_QR_SCAN)  # qr_scan|manual|promotion
    notes = db.Column(db.Text)
    created_at = db.Column(db.DateTime(timezone=True), server_default=func.now())

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'redemption_id': self.redemption_id,
            'business_id': self.business_id,
            'customer_id': self.customer_id,
            'stamps_awarded': self.stamps_awarded,
            'source': self.source,
            'notes': self.notes,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }
