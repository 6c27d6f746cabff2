"""Announcement model for community-wide notices."""

from datetime import datetime
from app import db


class Announcement(db.Model):
    """A notice shown to every participant, written in English or Chinese."""

    __tablename__ = 'announcements'

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(200), nullable=False)
    message = db.Column(db.Text, nullable=False)
    location = db.Column(db.String(255))
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def __repr__(self):
        return f'<Announcement {self.id}: {self.title}>'

    def to_dict(self):
        """Convert announcement to dictionary."""
        return {
            'id': self.id,
            'title': self.title,
            'message': self.message,
            'location': self.location,
            'created_at': self.created_at.isoformat() if self.created_at else None
        }

    @classmethod
    def get_recent(cls):
        """All announcements, newest first."""
        return cls.query.order_by(cls.created_at.desc(), cls.id.desc()).all()
