"""Contact (lead) model"""

from sqlalchemy import Column, String, Text, Boolean
from atelier.models.base import BaseModel


class Contact(BaseModel):
    """Submission of the public contact form"""

    __tablename__ = "contacts"

    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False)
    company = Column(String(255), nullable=False)
    service = Column(String(100), nullable=False)
    message = Column(Text, nullable=False)
    read = Column(Boolean, default=False, nullable=False)

    def __repr__(self):
        return f"<Contact(id={self.id}, email={self.email})>"
