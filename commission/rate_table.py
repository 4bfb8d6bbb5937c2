# commission/rate_table.py
from decimal import Decimal, InvalidOperation
from typing import Dict, Any, List, Mapping, Tuple
import logging

from sqlalchemy.exc import SQLAlchemyError

from extensions import db
from models import Settings
from commission.exceptions import InvalidCommissionStructureError

logger = logging.getLogger(__name__)

MIN_LEVEL = 0
MAX_LEVEL = 20

# Fixed payout per level. Level 0 is the direct sponsor.
DEFAULT_COMMISSION_STRUCTURE = {
    0: Decimal('165'),
    1: Decimal('70'), 2: Decimal('70'), 3: Decimal('70'), 4: Decimal('70'), 5: Decimal('70'),
    6: Decimal('60'), 7: Decimal('60'), 8: Decimal('60'), 9: Decimal('60'), 10: Decimal('60'),
    11: Decimal('50'), 12: Decimal('50'), 13: Decimal('50'), 14: Decimal('50'), 15: Decimal('50'),
    16: Decimal('40'),
    17: Decimal('30'),
    18: Decimal('20'),
    19: Decimal('10'),
    20: Decimal('5'),
}

NOMINAL_TOTAL_COMMISSION = Decimal('1170')


class CommissionRateTable:
    """
    Read-only level -> amount mapping for one distribution.
    Levels outside 0..20, or missing from the mapping, pay nothing.
    """

    def __init__(self, structure: Mapping[int, Decimal]):
        self._rates = {int(level): Decimal(str(amount)) for level, amount in structure.items()}

    @classmethod
    def default(cls) -> "CommissionRateTable":
        return cls(DEFAULT_COMMISSION_STRUCTURE)

    @classmethod
    def current(cls) -> "CommissionRateTable":
        """Load the operator's table from settings. Not cached: edits apply to the next purchase."""
        settings = SettingsHelper.get_settings()
        return cls(SettingsHelper.parse_commission_structure(settings.commission_structure))

    def rate_for(self, level: int) -> Decimal:
        if not isinstance(level, int) or level < MIN_LEVEL or level > MAX_LEVEL:
            return Decimal('0')
        return self._rates.get(level, Decimal('0'))

    def total(self) -> Decimal:
        return sum((self.rate_for(level) for level in range(MIN_LEVEL, MAX_LEVEL + 1)), Decimal('0'))

    def breakdown(self) -> List[Dict[str, Any]]:
        return [
            {
                'level': level,
                'amount': self.rate_for(level),
                'label': 'Direct' if level == 0 else f'Level {level}',
            }
            for level in range(MIN_LEVEL, MAX_LEVEL + 1)
        ]

    def validate(self) -> Tuple[bool, str]:
        """Sanity check for operator tooling; distribution never calls this"""
        for level, amount in self._rates.items():
            if level < MIN_LEVEL or level > MAX_LEVEL:
                return False, f"Invalid level {level}. Must be between {MIN_LEVEL}-{MAX_LEVEL}"
            if amount < 0:
                return False, f"Negative amount {amount} for level {level}"

        total = self.total()
        if total <= 0:
            return False, "Total commission payout must be positive"

        return True, f"Commission structure valid: {total} total across {MAX_LEVEL + 1} levels"

    def as_dict(self) -> Dict[int, Decimal]:
        return dict(self._rates)


class SettingsHelper:
    """Single-row settings store"""

    @staticmethod
    def get_settings() -> Settings:
        settings = Settings.query.order_by(Settings.id.asc()).first()
        if settings:
            return settings

        settings = Settings(commission_structure=SettingsHelper.serialize_commission_structure(
            DEFAULT_COMMISSION_STRUCTURE
        ))
        try:
            db.session.add(settings)
            db.session.commit()
        except SQLAlchemyError:
            db.session.rollback()
            logger.exception("Failed to create default settings")
            raise

        logger.info("Created default settings row")
        return settings

    @staticmethod
    def serialize_commission_structure(structure: Mapping[int, Decimal]) -> Dict[str, str]:
        # JSON keys must be strings
        return {str(level): str(amount) for level, amount in structure.items()}

    @staticmethod
    def parse_commission_structure(raw) -> Dict[int, Decimal]:
        """Coerce stored keys to int and values to Decimal, dropping anything unparsable."""
        if raw is None:
            return dict(DEFAULT_COMMISSION_STRUCTURE)

        structure = {}
        for key, value in dict(raw).items():
            try:
                level = int(key)
                amount = Decimal(str(value))
            except (TypeError, ValueError, InvalidOperation):
                logger.warning(f"Skipping unparsable commission entry {key!r}: {value!r}")
                continue
            if not amount.is_finite():
                logger.warning(f"Skipping non-finite commission amount for level {key!r}")
                continue
            structure[level] = amount
        return structure

    @staticmethod
    def update_commission_structure(mapping: Mapping) -> CommissionRateTable:
        """
        Replace the stored commission structure.
        Unparsable entries are skipped; out-of-range levels or negative
        amounts reject the whole update.
        """
        structure = SettingsHelper.parse_commission_structure(mapping)

        for level, amount in structure.items():
            if level < MIN_LEVEL or level > MAX_LEVEL:
                raise InvalidCommissionStructureError(
                    f"Invalid level {level}. Must be between {MIN_LEVEL}-{MAX_LEVEL}"
                )
            if amount < 0:
                raise InvalidCommissionStructureError(f"Negative amount {amount} for level {level}")

        settings = SettingsHelper.get_settings()
        settings.commission_structure = SettingsHelper.serialize_commission_structure(structure)
        try:
            db.session.commit()
        except SQLAlchemyError:
            db.session.rollback()
            logger.exception("Failed to save commission structure")
            raise

        logger.info(f"Commission structure updated: {len(structure)} levels")
        return CommissionRateTable(structure)
