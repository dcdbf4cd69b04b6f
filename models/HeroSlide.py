from datetime import datetime
from models import db

class HeroSlide(db.Model):
    __tablename__ = 'hero_slides'
    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(200), nullable=False)
    subtitle = db.Column(db.String(500), nullable=False)
    description = db.Column(db.Text)
    code_snippet = db.Column(db.Text)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    sort_order = db.Column(db.Integer, nullable=False, default=0)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def to_dict(self):
        return {
            "id": self.id,
            "title": self.title,
            "subtitle": self.subtitle,
            "description": self.description,
            "codeSnippet": self.code_snippet,
            "isActive": self.is_active,
            "sortOrder": self.sort_order,
        }
