"""
Rutas Seguras Backend — Contact Service
=======================================

What:  Stores messages from the public contact form and lists them for admins.
Why:   Write-once inbox. Nothing edits or deletes a contact through the API.
"""

import logging

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from rutas_seguras.exceptions import DatabaseError
from rutas_seguras.models.contact import Contact
from rutas_seguras.schemas.contact import (
    ContactCreateRequest,
    ContactListResponse,
    ContactResponse,
)
from rutas_seguras.services.pagination import PageRequest, paginate

logger = logging.getLogger(__name__)


class ContactService:

    async def create_contact(
        self, db: AsyncSession, payload: ContactCreateRequest
    ) -> ContactResponse:
        try:
            contact = Contact(**payload.model_dump())
            db.add(contact)
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error storing contact message: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not send your message. Please try again.",
                context={"error_type": type(e).__name__},
            )

        logger.info("Contact message received: %s", contact.id)
        return ContactResponse.model_validate(contact)

    async def list_contacts(
        self, db: AsyncSession, page: PageRequest
    ) -> ContactListResponse:
        try:
            query = select(Contact).order_by(Contact.created_at.desc(), Contact.id)
            contacts, pagination = await paginate(db, query, page)
            return ContactListResponse(
                contacts=[ContactResponse.model_validate(c) for c in contacts],
                pagination=pagination,
            )
        except SQLAlchemyError as e:
            logger.error("Database error listing contacts: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve messages. Please try again.",
                context={"error_type": type(e).__name__},
            )


# ── Singleton Instance ────────────────────────────────────────────────────
contact_service = ContactService()
