from commission.exceptions import (
    CommissionError,
    NotFoundError,
    InvalidCommissionStructureError,
    DuplicateDistributionError,
    InvalidAmountError,
)
from commission.rate_table import CommissionRateTable, SettingsHelper, DEFAULT_COMMISSION_STRUCTURE
from commission.activity import is_user_active, days_until_inactive, check_activity, process_maintenance_fee
from commission.directory import UserDirectory
from commission.genealogy import GenealogyHelper, GenealogyEntry
from commission.engine import CommissionEngine, Purchase
from commission.purchase import PurchaseWorkflow
from commission.maintenance import backfill_commission_types
