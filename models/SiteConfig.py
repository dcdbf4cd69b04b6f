from models import db

class SiteConfig(db.Model):
    __tablename__ = 'site_config'
    id = db.Column(db.Integer, primary_key=True)
    key = db.Column(db.String(100), unique=True, nullable=False) # e.g., "hero_title"
    value = db.Column(db.Text, nullable=False) # Plain text or JSON, depending on the key

    def to_dict(self):
        return {"key": self.key, "value": self.value}
