class CommissionError(Exception):
    """Base class for commission engine errors"""
    pass


class NotFoundError(CommissionError):
    """Referenced product, user or transaction does not exist"""

    def __init__(self, entity: str, entity_id):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} not found: {entity_id}")


class InvalidCommissionStructureError(CommissionError):
    """Operator supplied an unusable level -> amount mapping"""
    pass


class DuplicateDistributionError(CommissionError):
    """Commissions were already distributed for this purchase transaction"""

    def __init__(self, transaction_id: int):
        self.transaction_id = transaction_id
        super().__init__(f"Commissions already distributed for transaction {transaction_id}")


class InvalidAmountError(CommissionError):
    """Payment amount must be positive"""
    pass
