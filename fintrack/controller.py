"""
Application Controller for FinTrack

This module ties together the repository, the Drive gateway and the
AI advisor, and holds the in-memory view state the UI renders.

Flows:
1. Local mutation -> repository (persist) -> refresh view state
   -> if signed in, spawn a push of the full snapshot
2. Login -> pull remote snapshot -> overwrite local data -> refresh
   (or, when no remote snapshot exists yet, push local data to create it)

DESIGN DECISION: The local commit always happens first and synchronously.
The follow-up push runs as a separate task that nobody awaits on the
UI path; if it fails, the user sees "Sync failed." and local data is
unaffected.

Known gap: a manual sync started while a mutation-triggered push is
still in flight is not serialized against it.
"""

import asyncio
from datetime import date
from typing import Optional, Union

import structlog

from fintrack.agents import FinancialAdvisor
from fintrack.audit import ActivityLogger
from fintrack.config import get_settings
from fintrack.models.finance import (
    Category,
    CategoryBreakdown,
    FinancialSummary,
    Project,
    Transaction,
    TransactionType,
)
from fintrack.queries import expense_breakdown, summarize
from fintrack.services.storage import (
    FinanceRepository,
    JsonFileRecordStore,
    NotFoundError,
    StorageError,
)
from fintrack.services.sync import (
    AuthError,
    GoogleDriveGateway,
    SyncGatewayError,
    SyncSession,
)


LOGIN_FAILED_MESSAGE = "Login failed."
SYNC_FAILED_MESSAGE = "Sync failed."

logger = structlog.get_logger(__name__)


class FinanceController:
    """
    Owns the view state and orchestrates local and remote operations.
    
    View state:
        projects, categories     - mirrors of the repository
        active_project_id        - project on screen, if any
        transactions             - transactions of the active project
        ai_insight               - last analysis text, cleared on change
        is_syncing, error_message
    """
    
    def __init__(
        self,
        repository: FinanceRepository,
        gateway: GoogleDriveGateway,
        advisor: FinancialAdvisor,
        activity_logger: Optional[ActivityLogger] = None,
        default_currency: str = "USD",
    ):
        self._repository = repository
        self._gateway = gateway
        self._advisor = advisor
        self._activity_logger = activity_logger or ActivityLogger()
        self._default_currency = default_currency
        self._pending_pushes: set[asyncio.Task] = set()
        
        self.projects: list[Project] = repository.list_projects()
        self.categories: list[Category] = repository.list_categories()
        self.active_project_id: Optional[str] = None
        self.transactions: list[Transaction] = []
        self.ai_insight: Optional[str] = None
        self.is_syncing = False
        self.error_message: Optional[str] = None
    
    # ------------------------------------------------------------------
    # State accessors
    # ------------------------------------------------------------------
    
    @property
    def session(self) -> SyncSession:
        return self._gateway.session
    
    @property
    def activity(self) -> ActivityLogger:
        return self._activity_logger
    
    @property
    def sync_enabled(self) -> bool:
        return self._gateway.is_configured
    
    @property
    def advisor_enabled(self) -> bool:
        return self._advisor.enabled
    
    @property
    def is_authenticated(self) -> bool:
        return self.session.is_authenticated
    
    @property
    def active_project(self) -> Optional[Project]:
        for project in self.projects:
            if project.id == self.active_project_id:
                return project
        return None
    
    def transactions_newest_first(self) -> list[Transaction]:
        """Active project transactions, most recently added first."""
        return list(reversed(self.transactions))
    
    def category_label(self, category_id: str) -> str:
        return Category.label_for(category_id, self.categories)
    
    def summary(self) -> FinancialSummary:
        return summarize(self.transactions)
    
    def expense_breakdown(self) -> list[CategoryBreakdown]:
        return expense_breakdown(self.transactions, self.categories)
    
    def dismiss_error(self) -> None:
        self.error_message = None
    
    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------
    
    def select_project(self, project_id: str) -> Project:
        """
        Raises:
            NotFoundError: If the project does not exist
        """
        project = self._repository.get_project(project_id)
        self.active_project_id = project.id
        self.transactions = self._repository.list_transactions(project.id)
        self.ai_insight = None
        return project
    
    def clear_selection(self) -> None:
        self.active_project_id = None
        self.transactions = []
        self.ai_insight = None
    
    def _reload(self) -> None:
        self.projects = self._repository.list_projects()
        self.categories = self._repository.list_categories()
        if self.active_project_id and self.active_project is None:
            self.clear_selection()
        elif self.active_project_id:
            self.transactions = self._repository.list_transactions(self.active_project_id)
    
    # ------------------------------------------------------------------
    # Local mutations
    # ------------------------------------------------------------------
    
    async def create_project(
        self,
        name: str,
        description: str = "",
        currency: Optional[str] = None,
    ) -> Project:
        project = Project.create(
            name=name,
            description=description,
            currency=currency or self._default_currency,
        )
        self.projects = self._repository.add_project(project)
        self._activity_logger.log_project_created(project.id, project.name)
        self._after_mutation()
        return project
    
    async def add_transaction(
        self,
        title: str,
        amount: Union[str, float],
        type: Union[TransactionType, str],
        category: str,
        on: Optional[date] = None,
        description: str = "",
    ) -> Transaction:
        """
        Add a transaction to the active project.
        
        `amount` may be the raw form text ("12.5"); it is stored as a number.
        
        Raises:
            NotFoundError: If no project is active or it no longer exists
            ValueError: If the fields do not form a valid transaction
        """
        if not self.active_project_id:
            raise NotFoundError("No active project")
        project = self._repository.get_project(self.active_project_id)
        
        if isinstance(amount, str):
            amount = amount.strip()
        transaction = Transaction.create(
            project_id=project.id,
            title=title,
            amount=amount,
            type=TransactionType(type),
            category=category,
            on=on,
            description=description,
        )
        
        updated = self._repository.add_transaction(transaction)
        self.transactions = [t for t in updated if t.project_id == project.id]
        self._activity_logger.log_transaction_added(
            transaction_id=transaction.id,
            project_id=project.id,
            amount=transaction.amount,
            transaction_type=transaction.type.value,
        )
        self._after_mutation()
        return transaction
    
    async def delete_transaction(self, transaction_id: str) -> None:
        updated = self._repository.delete_transaction(transaction_id)
        self.transactions = [
            t for t in updated if t.project_id == self.active_project_id
        ]
        self._activity_logger.log_transaction_deleted(transaction_id)
        self._after_mutation()
    
    async def add_category(
        self,
        name: str,
        color: str,
        icon_name: str,
    ) -> Optional[Category]:
        """Add a user category. Blank names are ignored."""
        if not name.strip():
            return None
        category = Category.create(name=name.strip(), color=color, icon_name=icon_name)
        await self.update_categories([*self.categories, category])
        return category
    
    async def delete_category(self, category_id: str) -> None:
        """
        Delete a user category. Transactions keep the dangling id.
        
        Raises:
            ProtectedCategoryError: For built-in categories
        """
        self.categories = self._repository.delete_category(category_id)
        self._activity_logger.log_categories_updated(len(self.categories))
        self._after_mutation()
    
    async def update_categories(self, categories: list[Category]) -> None:
        self._repository.save_categories(categories)
        self.categories = list(categories)
        self._activity_logger.log_categories_updated(len(categories))
        self._after_mutation()
    
    def _after_mutation(self) -> None:
        self.ai_insight = None
        if self.is_authenticated:
            self._spawn_push()
    
    # ------------------------------------------------------------------
    # Remote sync
    # ------------------------------------------------------------------
    
    def _spawn_push(self) -> None:
        task = asyncio.get_running_loop().create_task(self._push_in_background())
        self._pending_pushes.add(task)
        task.add_done_callback(self._pending_pushes.discard)
    
    async def _push_in_background(self) -> None:
        try:
            snapshot = self._repository.snapshot()
            await self._gateway.push(snapshot)
        except (SyncGatewayError, StorageError) as e:
            self.error_message = SYNC_FAILED_MESSAGE
            self._activity_logger.log_sync_failed("push", str(e))
            return
        self._activity_logger.log_snapshot_pushed(len(snapshot.transactions))
    
    async def wait_for_pending_sync(self) -> None:
        """Wait for every push spawned so far to finish."""
        while self._pending_pushes:
            await asyncio.gather(*list(self._pending_pushes))
    
    async def login(self) -> bool:
        """
        Sign in and pull the remote snapshot.
        
        Returns True if sign-in and the initial sync both succeeded.
        """
        self.error_message = None
        try:
            await self._gateway.login()
        except AuthError as e:
            self.error_message = LOGIN_FAILED_MESSAGE
            self._activity_logger.log_auth_failed(str(e))
            return False
        
        self._activity_logger.log_login()
        return await self.sync(pull=True)
    
    async def logout(self) -> None:
        await self._gateway.logout()
        self._activity_logger.log_logout()
        self._reload()
    
    async def sync(self, pull: bool = False) -> bool:
        """
        Pull (overwrite local from remote) or push (overwrite remote
        from local). Does nothing unless signed in.
        
        A pull that finds no remote snapshot pushes local data instead.
        The remote snapshot's lastSynced is never consulted. A pull that
        cannot be written locally is rolled back and reported like any
        other sync failure.
        """
        if not self.is_authenticated:
            return False
        
        self.is_syncing = True
        try:
            if pull:
                data = await self._gateway.pull()
                if data is not None:
                    self._repository.restore(data)
                    self._reload()
                    self._activity_logger.log_snapshot_pulled(
                        projects=len(data.projects),
                        transactions=len(data.transactions),
                        categories=len(data.categories),
                    )
                else:
                    await self._gateway.push(self._repository.snapshot())
                    self._activity_logger.log_remote_initialized()
            else:
                snapshot = self._repository.snapshot()
                await self._gateway.push(snapshot)
                self._activity_logger.log_snapshot_pushed(len(snapshot.transactions))
            self.error_message = None
            return True
        except (SyncGatewayError, StorageError) as e:
            self.error_message = SYNC_FAILED_MESSAGE
            self._activity_logger.log_sync_failed("pull" if pull else "push", str(e))
            return False
        finally:
            self.is_syncing = False
    
    # ------------------------------------------------------------------
    # Advisory
    # ------------------------------------------------------------------
    
    async def analyze_active_project(self) -> Optional[str]:
        project = self.active_project
        if project is None:
            return None
        self.ai_insight = await self._advisor.analyze(project, self.transactions)
        return self.ai_insight
    
    async def suggest_category(self, title: str, description: str = "") -> Optional[str]:
        """Suggested category id, or None when there is no title to go on."""
        if not title.strip():
            return None
        return await self._advisor.suggest_category(title, description, self.categories)


def create_app_controller() -> FinanceController:
    """
    Factory function to create the controller and everything it uses.
    
    Sync and AI are wired up whether or not they are configured; an
    unconfigured gateway leaves the session uninitialized (local mode)
    and an unconfigured advisor returns its fallbacks.
    """
    settings = get_settings()
    app_settings = settings.app
    
    activity_logger = ActivityLogger()
    repository = FinanceRepository(JsonFileRecordStore(app_settings.data_dir))
    
    session = SyncSession()
    gateway = GoogleDriveGateway(session, settings.google_drive)
    gateway.initialize()
    
    advisor = FinancialAdvisor(settings.gemini, activity_logger=activity_logger)
    
    return FinanceController(
        repository=repository,
        gateway=gateway,
        advisor=advisor,
        activity_logger=activity_logger,
        default_currency=app_settings.default_currency,
    )
