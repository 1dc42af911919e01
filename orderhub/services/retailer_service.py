"""Inline retailer creation used by the order committer."""
import logging
import secrets
from typing import Any, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from orderhub.exceptions import PersistenceError
from orderhub.models import AppUser, UserRole, Retailer, Partnership, PartnershipStatus
from orderhub.services.order_draft import NewRetailerInfo

logger = logging.getLogger(__name__)


def split_contact_name(name: str) -> Tuple[str, str]:
    """Split 'Jane Q Doe' into ('Jane', 'Q Doe')."""
    parts = (name or '').split()
    if not parts:
        return '', ''
    return parts[0], ' '.join(parts[1:])


def generate_temporary_password() -> str:
    return f"temp-{secrets.token_urlsafe(12)}"


def create_retailer_inline(session: Session, distributor_id: Any, info: NewRetailerInfo) -> Retailer:
    """
    Create identity + retailer profile + accepted partnership for a retailer
    entered during order submission.

    Only flushes; the caller owns the transaction and rolls everything back
    if a later step fails.

    Raises:
        PersistenceError: stage 'retailer' when either write fails.
    """
    first_name, last_name = split_contact_name(info.name)
    try:
        user = AppUser(
            email=info.email.lower(),
            first_name=first_name,
            last_name=last_name,
            phone=info.phone or None,
            business_name=info.name,
            role=UserRole.RETAILER.value,
        )
        user.set_password(generate_temporary_password())
        session.add(user)
        session.flush()

        retailer = Retailer(
            user_id=user.id,
            store_address=info.address or None,
            store_type='retail',
        )
        session.add(retailer)
        session.flush()

        session.add(Partnership(
            distributor_id=distributor_id,
            retailer_id=retailer.id,
            status=PartnershipStatus.ACCEPTED.value
        ))
        session.flush()
    except SQLAlchemyError as e:
        logger.error(f"Failed to create retailer '{info.email}': {e}")
        raise PersistenceError('retailer', cause=e) from e

    logger.info(f"Created retailer {retailer.id} ({info.email}) for distributor {distributor_id}")
    return retailer
