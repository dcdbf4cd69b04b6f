from datetime import datetime
from models import db

class Category(db.Model):
    __tablename__ = 'categories'
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), unique=True, nullable=False)
    sort_order = db.Column(db.Integer, nullable=False, default=0)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    # Links are owned by their category and always come back in manual order
    links = db.relationship(
        'Link',
        back_populates='category',
        order_by='[Link.sort_order, Link.id]',
        cascade="all, delete-orphan",
    )

    def to_dict(self, include_links=True):
        data = {
            "id": self.id,
            "name": self.name,
            "sortOrder": self.sort_order,
        }
        if include_links:
            data["links"] = [link.to_dict() for link in self.links]
        return data

    def __repr__(self):
        return f"<Category {self.name}>"
