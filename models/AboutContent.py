from models import db

class AboutContent(db.Model):
    __tablename__ = 'about_content'
    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(500), nullable=False, default='')
    description = db.Column(db.Text, nullable=False, default='')

    def to_dict(self):
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
        }
