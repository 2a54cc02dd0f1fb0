"""
Shared fixtures for the FinTrack tests.

No test talks to Google: the Drive gateway is replaced by an in-memory
fake for controller tests, and the real gateway is driven through
mocked Drive services in its own tests.
"""

from datetime import date
from typing import Optional

import pytest

from fintrack.audit import ActivityLogger
from fintrack.config import GeminiSettings
from fintrack.agents import FinancialAdvisor
from fintrack.controller import FinanceController
from fintrack.models.finance import AppData, Project, Transaction, TransactionType
from fintrack.services.storage import FinanceRepository, InMemoryRecordStore, StorageError
from fintrack.services.sync import AuthError, SyncError, SyncSession


class FakeDriveGateway:
    """In-memory stand-in for GoogleDriveGateway."""
    
    def __init__(self, configured: bool = True):
        self.session = SyncSession()
        self.is_configured = configured
        if configured:
            self.session.mark_ready()
        self.remote: Optional[AppData] = None
        self.push_count = 0
        self.fail_login = False
        self.fail_push = False
        self.fail_pull = False
    
    async def login(self):
        if self.fail_login:
            raise AuthError("consent denied")
        self.session.authenticate(object())
    
    async def logout(self):
        self.session.clear()
    
    async def push(self, snapshot: AppData) -> str:
        if self.fail_push:
            raise SyncError("HTTP 503")
        self.remote = AppData.model_validate_json(snapshot.to_json())
        self.push_count += 1
        return "file-1"
    
    async def pull(self) -> Optional[AppData]:
        if self.fail_pull:
            raise SyncError("connection reset")
        return self.remote


class FailingRecordStore(InMemoryRecordStore):
    """In-memory store whose reads or writes fail for chosen keys."""
    
    def __init__(self):
        super().__init__()
        self.fail_writes: set[str] = set()
        self.fail_reads: set[str] = set()
    
    def get(self, key):
        if key in self.fail_reads:
            raise StorageError(f"cannot read {key}")
        return super().get(key)
    
    def set(self, key, value):
        if key in self.fail_writes:
            raise StorageError("disk full")
        super().set(key, value)


def _make_transaction(
    project_id: str,
    title: str = "Coffee",
    amount: float = 4.5,
    type: TransactionType = TransactionType.EXPENSE,
    category: str = "food",
) -> Transaction:
    return Transaction(
        project_id=project_id,
        title=title,
        amount=amount,
        type=type,
        date=date(2024, 3, 1),
        category=category,
    )


@pytest.fixture
def make_transaction():
    """Factory for expense transactions dated 2024-03-01."""
    return _make_transaction


@pytest.fixture
def make_gateway():
    """Factory for FakeDriveGateway instances."""
    return FakeDriveGateway


@pytest.fixture
def store():
    return InMemoryRecordStore()


@pytest.fixture
def failing_store():
    return FailingRecordStore()


@pytest.fixture
def repository(store):
    return FinanceRepository(store)


@pytest.fixture
def project():
    return Project(id="p1", name="Household", description="Home budget")


@pytest.fixture
def gateway():
    return FakeDriveGateway()


@pytest.fixture
def disabled_advisor():
    return FinancialAdvisor(settings=GeminiSettings(api_key=None))


@pytest.fixture
def activity_logger():
    return ActivityLogger()


@pytest.fixture
def controller(repository, gateway, disabled_advisor, activity_logger):
    return FinanceController(
        repository=repository,
        gateway=gateway,
        advisor=disabled_advisor,
        activity_logger=activity_logger,
    )
