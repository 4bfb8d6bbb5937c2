# commission/maintenance.py
import logging
from typing import Tuple

from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError

from extensions import db
from models import Commission, CommissionType

logger = logging.getLogger(__name__)


def _untyped():
    return Commission.query.filter(or_(Commission.type.is_(None), Commission.type == ''))


def backfill_commission_types(batch_size: int = 500) -> Tuple[int, int]:
    """
    Give ledger rows written before commission types existed their type
    (level 0 -> direct, otherwise indirect). Returns (migrated, remaining).
    """
    migrated = 0

    while True:
        batch = _untyped().order_by(Commission.id.asc()).limit(batch_size).all()
        if not batch:
            break

        try:
            for commission in batch:
                commission.type = CommissionType.for_level(commission.level).value
            db.session.commit()
        except SQLAlchemyError:
            db.session.rollback()
            logger.exception(f"Commission type backfill failed after {migrated} rows")
            raise

        migrated += len(batch)
        logger.info(f"Migrated {migrated} commissions...")

    remaining = _untyped().count()
    if remaining:
        logger.warning(f"{remaining} commissions still need migration")
    return migrated, remaining
