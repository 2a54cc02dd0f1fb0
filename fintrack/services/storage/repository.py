"""
Finance Repository

Typed accessors over a RecordStore. Every collection is read and
written wholesale under its own key:

- fintrack_projects      -> list[Project]
- fintrack_transactions  -> list[Transaction]
- fintrack_categories    -> list[Category]

add/delete operations always work on the full, unfiltered collection
and return it, so callers re-filter for their own view (for example,
the transactions of the project on screen).

Malformed stored data is not validated beyond model parsing; errors
propagate to the caller.
"""

from datetime import datetime, timezone
from typing import Optional

import structlog

from fintrack.models.finance import (
    AppData,
    Category,
    Project,
    Transaction,
    default_categories,
)
from fintrack.services.storage.interface import (
    NotFoundError,
    ProtectedCategoryError,
    RecordStore,
    StorageError,
)


PROJECTS_KEY = "fintrack_projects"
TRANSACTIONS_KEY = "fintrack_transactions"
CATEGORIES_KEY = "fintrack_categories"

logger = structlog.get_logger(__name__)


class FinanceRepository:
    """Projects, transactions and categories persisted in a RecordStore."""
    
    def __init__(self, store: RecordStore):
        self._store = store
    
    # --- Projects ---
    
    def list_projects(self) -> list[Project]:
        data = self._store.get(PROJECTS_KEY)
        return [Project.model_validate(item) for item in data] if data else []
    
    def save_projects(self, projects: list[Project]) -> None:
        self._store.set(PROJECTS_KEY, [p.to_record() for p in projects])
    
    def add_project(self, project: Project) -> list[Project]:
        projects = [*self.list_projects(), project]
        self.save_projects(projects)
        return projects
    
    def get_project(self, project_id: str) -> Project:
        for project in self.list_projects():
            if project.id == project_id:
                return project
        raise NotFoundError(f"Project not found: {project_id}")
    
    # --- Transactions ---
    
    def list_transactions(self, project_id: Optional[str] = None) -> list[Transaction]:
        """All transactions in insertion order, optionally for one project."""
        data = self._store.get(TRANSACTIONS_KEY)
        transactions = [Transaction.model_validate(item) for item in data] if data else []
        if project_id is not None:
            return [t for t in transactions if t.project_id == project_id]
        return transactions
    
    def save_transactions(self, transactions: list[Transaction]) -> None:
        self._store.set(TRANSACTIONS_KEY, [t.to_record() for t in transactions])
    
    def add_transaction(self, transaction: Transaction) -> list[Transaction]:
        transactions = [*self.list_transactions(), transaction]
        self.save_transactions(transactions)
        return transactions
    
    def delete_transaction(self, transaction_id: str) -> list[Transaction]:
        """Remove a transaction by id. Unknown ids leave the collection as is."""
        transactions = [t for t in self.list_transactions() if t.id != transaction_id]
        self.save_transactions(transactions)
        return transactions
    
    # --- Categories ---
    
    def list_categories(self) -> list[Category]:
        """Stored categories, or the seed set if none were ever saved."""
        data = self._store.get(CATEGORIES_KEY)
        if data is None:
            return default_categories()
        return [Category.model_validate(item) for item in data]
    
    def save_categories(self, categories: list[Category]) -> None:
        self._store.set(CATEGORIES_KEY, [c.to_record() for c in categories])
    
    def add_category(self, category: Category) -> list[Category]:
        categories = [*self.list_categories(), category]
        self.save_categories(categories)
        return categories
    
    def delete_category(self, category_id: str) -> list[Category]:
        """
        Remove a user category.
        
        Transactions referencing it are left untouched.
        
        Raises:
            ProtectedCategoryError: If the category is a built-in one
        """
        categories = self.list_categories()
        for category in categories:
            if category.id == category_id and category.is_default:
                raise ProtectedCategoryError(category_id)
        categories = [c for c in categories if c.id != category_id]
        self.save_categories(categories)
        return categories
    
    # --- Full snapshot ---
    
    def snapshot(self) -> AppData:
        """Everything in the store plus a fresh timestamp."""
        return AppData(
            projects=self.list_projects(),
            transactions=self.list_transactions(),
            categories=self.list_categories(),
            last_synced=datetime.now(timezone.utc),
        )
    
    def restore(self, data: AppData) -> None:
        """
        Overwrite local collections from a snapshot.
        
        Only collections present in the payload are written; a snapshot
        parsed from JSON without "categories" leaves local categories as is.
        
        All or nothing: if a write fails, collections already written
        are put back to their previous stored values before the
        StorageError is re-raised.
        """
        present = data.model_fields_set
        writes = []
        if "projects" in present:
            writes.append((PROJECTS_KEY, [p.to_record() for p in data.projects]))
        if "transactions" in present:
            writes.append((TRANSACTIONS_KEY, [t.to_record() for t in data.transactions]))
        if "categories" in present:
            writes.append((CATEGORIES_KEY, [c.to_record() for c in data.categories]))
        
        previous = {key: self._store.get(key) for key, _ in writes}
        written: list[str] = []
        try:
            for key, records in writes:
                self._store.set(key, records)
                written.append(key)
        except StorageError:
            self._roll_back(written, previous)
            raise
        
        logger.info("snapshot_restored", collections=[key for key, _ in writes])
    
    def _roll_back(self, keys: list[str], previous: dict) -> None:
        for key in keys:
            try:
                self._store.set(key, previous[key])
            except StorageError as e:
                logger.error("snapshot_rollback_failed", key=key, error=str(e))
        logger.warning("snapshot_restore_rolled_back", collections=keys)
