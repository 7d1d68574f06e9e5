"""Public contact form endpoint"""

import logging
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from atelier.database import get_db
from atelier.models import Contact
from atelier.schemas.contact import ContactCreate, ContactCreatedResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Contact"])


@router.post("/contact", response_model=ContactCreatedResponse, status_code=status.HTTP_201_CREATED)
async def submit_contact(
    data: ContactCreate,
    db: AsyncSession = Depends(get_db),
):
    """
    Store a contact form submission for the admin inbox

    - **name**, **email**, **company**, **service**: who is asking and for what
    - **message**: at least 10 characters
    """
    contact = Contact(**data.model_dump(), read=False)
    db.add(contact)
    await db.commit()
    await db.refresh(contact)
    logger.info(f"New contact request {contact.id} for {contact.service}")

    return ContactCreatedResponse(
        message="Thank you for your message. We will get back to you soon.",
        contact_id=contact.id,
    )
