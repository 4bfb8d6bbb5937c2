# commission/directory.py
from decimal import Decimal
from typing import List, Optional
import logging

from sqlalchemy import update

from extensions import db
from models import User

logger = logging.getLogger(__name__)

WALLET_COLUMNS = {
    'balance': User.wallet_balance,
    'pending': User.wallet_pending,
    'total_earned': User.wallet_total_earned,
}


class UserDirectory:
    """The only user reads and writes the commission core performs."""

    @staticmethod
    def find_by_id(user_id: Optional[int]) -> Optional[User]:
        if user_id is None:
            return None
        return db.session.get(User, user_id)

    @staticmethod
    def find_direct_children_of(sponsor_id: int) -> List[User]:
        return User.query.filter(User.sponsor_id == sponsor_id).all()

    @staticmethod
    def find_direct_children_of_many(sponsor_ids: List[int]) -> List[User]:
        if not sponsor_ids:
            return []
        return User.query.filter(User.sponsor_id.in_(sponsor_ids)).all()

    @staticmethod
    def increment_wallet(user_id: int, balance: Decimal = None, total_earned: Decimal = None,
                         pending: Decimal = None) -> bool:
        """
        Add deltas to wallet fields in a single UPDATE ... SET col = col + :delta.
        Concurrent credits to the same user cannot overwrite each other.
        Caller owns the commit.
        """
        deltas = {'balance': balance, 'total_earned': total_earned, 'pending': pending}
        values = {
            WALLET_COLUMNS[name]: WALLET_COLUMNS[name] + Decimal(delta)
            for name, delta in deltas.items()
            if delta is not None
        }
        if not values:
            return False

        result = db.session.execute(
            update(User)
            .where(User.id == user_id)
            .values(values)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            logger.warning(f"Wallet increment matched no user: {user_id}")
            return False

        # Loaded copy must re-read the columns the UPDATE touched
        cached = db.session.identity_map.get(db.session.identity_key(User, user_id))
        if cached is not None:
            db.session.expire(cached, [column.key for column in values])
        return True
