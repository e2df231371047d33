from flask_sqlalchemy import SQLAlchemy
from datetime import datetime

from helpers import parse_date, round_money

db = SQLAlchemy()


class DepreciationRecord(db.Model):
    """
    A stored depreciation schedule for one asset of one company.

    The inputs are kept next to the computed entries so a schedule can be
    traced back to what was submitted. Entries are never edited; a new
    calculation is a new record.
    """
    __tablename__ = 'depreciation_records'

    id = db.Column(db.Integer, primary_key=True)
    company_id = db.Column(db.String(100), nullable=False, index=True)
    asset_id = db.Column(db.String(100), nullable=False, index=True)

    # Inputs
    cost = db.Column(db.Float, nullable=False)
    depreciation_rate = db.Column(db.Float, nullable=True)  # Annual fraction, e.g. 0.12
    period_count = db.Column(db.Integer, nullable=True)  # Monthly periods
    purchase_date = db.Column(db.Date, nullable=False)

    # Result
    periods_calculated = db.Column(db.Integer, nullable=False, default=0)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    entries = db.relationship('DepreciationEntry', backref='record',
                              order_by='DepreciationEntry.period',
                              cascade='all, delete-orphan')

    @property
    def schedule(self):
        """Entries as plain dicts, in the engine's output format."""
        return [e.to_schedule_entry() for e in self.entries]

    @property
    def total_depreciation(self):
        return round_money(sum(e.depreciation_amount for e in self.entries))

    def __repr__(self):
        return f'<DepreciationRecord {self.company_id}/{self.asset_id} ({self.periods_calculated} periods)>'


class DepreciationEntry(db.Model):
    """One monthly period of a stored schedule."""
    __tablename__ = 'depreciation_entries'

    id = db.Column(db.Integer, primary_key=True)
    record_id = db.Column(db.Integer, db.ForeignKey('depreciation_records.id'), nullable=False)
    period = db.Column(db.Integer, nullable=False)
    date = db.Column(db.Date, nullable=False)
    fiscal_year = db.Column(db.String(9), nullable=False)  # '2024-2025'
    depreciation_amount = db.Column(db.Float, nullable=False)
    cumulative = db.Column(db.Float, nullable=False)
    book_value = db.Column(db.Float, nullable=False)
    # Copied from the record so entries can be queried on their own
    company_id = db.Column(db.String(100), nullable=False, index=True)
    asset_id = db.Column(db.String(100), nullable=False, index=True)

    @classmethod
    def from_schedule_entry(cls, entry):
        return cls(
            period=entry['period'],
            date=parse_date(entry['date']),
            fiscal_year=entry['fiscal_year'],
            depreciation_amount=entry['depreciation_amount'],
            cumulative=entry['cumulative'],
            book_value=entry['book_value'],
            company_id=entry['company_id'],
            asset_id=entry['asset_id'],
        )

    def to_schedule_entry(self):
        return {
            'period': self.period,
            'date': self.date.isoformat(),
            'fiscal_year': self.fiscal_year,
            'depreciation_amount': self.depreciation_amount,
            'cumulative': self.cumulative,
            'book_value': self.book_value,
            'company_id': self.company_id,
            'asset_id': self.asset_id,
        }

    def __repr__(self):
        return f'<DepreciationEntry #{self.period} {self.fiscal_year} {self.depreciation_amount}>'
