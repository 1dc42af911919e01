"""Partnership requests between distributors and retailers."""
import logging
from typing import Any

from sqlalchemy.orm import Session

from orderhub.exceptions import BusinessLogicError, NotFoundError
from orderhub.models import Partnership, PartnershipStatus, Retailer

logger = logging.getLogger(__name__)


def send_partnership_request(session: Session, distributor_id: Any, retailer_id: Any) -> Partnership:
    """Create a pending partnership request from a distributor to a retailer."""
    try:
        retailer = session.query(Retailer).filter(Retailer.id == retailer_id).first()
        if not retailer:
            raise NotFoundError('Retailer not found.')

        existing = session.query(Partnership).filter(
            Partnership.distributor_id == distributor_id,
            Partnership.retailer_id == retailer_id
        ).first()
        if existing:
            raise BusinessLogicError(f'A partnership with this retailer already exists ({existing.status}).')

        partnership = Partnership(
            distributor_id=distributor_id,
            retailer_id=retailer_id,
            status=PartnershipStatus.PENDING.value
        )
        session.add(partnership)
        session.commit()
        logger.info(f"Partnership request {partnership.id}: distributor {distributor_id} -> retailer {retailer_id}")
        return partnership
    except (BusinessLogicError, NotFoundError) as e:
        session.rollback()
        raise e
    except Exception:
        session.rollback()
        raise


def respond_to_partnership(session: Session, partnership_id: Any, retailer_id: Any, accept: bool) -> Partnership:
    """Accept or reject a pending request addressed to the retailer."""
    try:
        partnership = session.query(Partnership).filter(
            Partnership.id == partnership_id,
            Partnership.retailer_id == retailer_id
        ).first()
        if not partnership:
            raise NotFoundError('Partnership request not found.')
        if partnership.status != PartnershipStatus.PENDING.value:
            raise BusinessLogicError(f'This request was already {partnership.status}.')

        partnership.status = (PartnershipStatus.ACCEPTED if accept else PartnershipStatus.REJECTED).value
        session.commit()
        return partnership
    except (BusinessLogicError, NotFoundError) as e:
        session.rollback()
        raise e
    except Exception:
        session.rollback()
        raise
