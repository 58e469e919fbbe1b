"""Application use cases."""

from loanledger.application.use_cases.list_movements import ListMovementsUseCase
from loanledger.application.use_cases.record_loan import RecordLoanResult, RecordLoanUseCase
from loanledger.application.use_cases.record_return import (
    RecordReturnResult,
    RecordReturnUseCase,
)

__all__ = [
    "RecordLoanUseCase",
    "RecordLoanResult",
    "RecordReturnUseCase",
    "RecordReturnResult",
    "ListMovementsUseCase",
]
