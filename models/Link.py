from datetime import datetime
from models import db

class Link(db.Model):
    __tablename__ = 'links'
    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(200), nullable=False)
    url = db.Column(db.String(500), nullable=False)
    icon = db.Column(db.String(500))
    snapshot_url = db.Column(db.String(500))
    description = db.Column(db.Text)
    clicks = db.Column(db.Integer, nullable=False, default=0)
    category_id = db.Column(db.Integer, db.ForeignKey('categories.id', ondelete='CASCADE'), nullable=False, index=True)
    sort_order = db.Column(db.Integer, nullable=False, default=0)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    # Define relationships
    category = db.relationship('Category', back_populates='links')

    @property
    def has_snapshot(self):
        return bool(self.snapshot_url and self.snapshot_url.strip())

    def to_dict(self):
        return {
            "id": self.id,
            "title": self.title,
            "url": self.url,
            "icon": self.icon,
            "snapshotUrl": self.snapshot_url,
            "description": self.description,
            "clicks": self.clicks,
            "categoryId": self.category_id,
            "sortOrder": self.sort_order,
        }
