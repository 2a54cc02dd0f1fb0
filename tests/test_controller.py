"""
Flow tests for the application controller.

The Drive gateway is the in-memory fake from conftest;
the advisor is disabled unless a test injects a mocked model.
"""

from datetime import date
from unittest.mock import AsyncMock, MagicMock

import pytest

from fintrack.agents import FinancialAdvisor
from fintrack.config import GeminiSettings
from fintrack.controller import (
    LOGIN_FAILED_MESSAGE,
    SYNC_FAILED_MESSAGE,
    FinanceController,
)
from fintrack.models.activity import ActivityEventType
from fintrack.models.finance import AppData, Category, Project, TransactionType
from fintrack.services.storage import (
    CATEGORIES_KEY,
    TRANSACTIONS_KEY,
    FinanceRepository,
    NotFoundError,
    ProtectedCategoryError,
)
from fintrack.services.sync import SessionState


def event_types(controller):
    return [e.event_type for e in controller.activity.recent()]


class TestLocalMutations:
    """Tests for changes made without a Drive session."""
    
    @pytest.mark.asyncio
    async def test_create_project(self, controller, repository):
        project = await controller.create_project("Household", "Home budget")
        
        assert project.currency == "USD"
        assert [p.id for p in controller.projects] == [project.id]
        assert repository.list_projects() == controller.projects
        assert ActivityEventType.PROJECT_CREATED in event_types(controller)
    
    @pytest.mark.asyncio
    async def test_add_transaction_parses_amount(self, controller, repository):
        """Test that form text "12.5" is stored as the number 12.5."""
        project = await controller.create_project("Household")
        controller.select_project(project.id)
        
        tx = await controller.add_transaction(
            title="Lunch",
            amount=" 12.5 ",
            type="expense",
            category="food",
            on=date(2024, 3, 1),
        )
        
        assert tx.amount == 12.5
        assert tx.type == TransactionType.EXPENSE
        assert controller.transactions == [tx]
        assert repository.list_transactions(project.id)[0].amount == 12.5
        assert controller.summary().total_expense == 12.5
    
    @pytest.mark.asyncio
    @pytest.mark.parametrize("amount", ["inf", "1e999"])
    async def test_non_finite_amount_rejected(self, controller, repository, amount):
        """Test that an overflowing amount never reaches the store or the snapshot."""
        project = await controller.create_project("Household")
        controller.select_project(project.id)
        
        with pytest.raises(ValueError):
            await controller.add_transaction("Lunch", amount, TransactionType.EXPENSE, "food")
        
        assert repository.list_transactions() == []
        snapshot = repository.snapshot()
        assert AppData.model_validate_json(snapshot.to_json()).transactions == []
    
    @pytest.mark.asyncio
    async def test_add_transaction_needs_active_project(self, controller):
        with pytest.raises(NotFoundError):
            await controller.add_transaction("Lunch", 5, TransactionType.EXPENSE, "food")
    
    @pytest.mark.asyncio
    async def test_invalid_amount_rejected(self, controller, repository):
        project = await controller.create_project("Household")
        controller.select_project(project.id)
        with pytest.raises(ValueError):
            await controller.add_transaction("Lunch", "abc", TransactionType.EXPENSE, "food")
        assert repository.list_transactions() == []
    
    @pytest.mark.asyncio
    async def test_transactions_are_scoped_to_active_project(self, controller, repository, make_transaction):
        repository.add_project(Project(id="p1", name="One"))
        repository.add_project(Project(id="p2", name="Two"))
        repository.add_transaction(make_transaction("p1", title="Mine"))
        repository.add_transaction(make_transaction("p2", title="Other"))
        
        controller.select_project("p1")
        assert [t.title for t in controller.transactions] == ["Mine"]
        
        await controller.delete_transaction(controller.transactions[0].id)
        assert controller.transactions == []
        assert [t.title for t in repository.list_transactions()] == ["Other"]
    
    def test_newest_transactions_first(self, controller, repository, project, make_transaction):
        """Test that the list follows insertion order, not the transaction date."""
        repository.add_project(project)
        repository.add_transaction(make_transaction("p1", title="First"))
        earlier_dated = make_transaction("p1", title="Second").model_copy(
            update={"date": date(2023, 1, 1)}
        )
        repository.add_transaction(earlier_dated)
        controller.select_project("p1")
        
        assert [t.title for t in controller.transactions_newest_first()] == ["Second", "First"]
    
    def test_select_unknown_project(self, controller):
        with pytest.raises(NotFoundError):
            controller.select_project("missing")
    
    @pytest.mark.asyncio
    async def test_add_and_delete_category(self, controller, repository):
        category = await controller.add_category("Pet Food", "text-teal-500", "heart")
        
        assert category.id.startswith("pet_food_")
        assert controller.categories[-1] == category
        assert repository.list_categories()[-1].id == category.id
        
        await controller.delete_category(category.id)
        assert category.id not in [c.id for c in controller.categories]
    
    @pytest.mark.asyncio
    async def test_blank_category_name_ignored(self, controller):
        assert await controller.add_category("   ", "text-teal-500", "heart") is None
        assert len(controller.categories) == 9
    
    @pytest.mark.asyncio
    async def test_default_category_cannot_be_deleted(self, controller):
        with pytest.raises(ProtectedCategoryError):
            await controller.delete_category("salary")
    
    @pytest.mark.asyncio
    async def test_deleted_category_leaves_dangling_label(self, controller, repository, project):
        """Test that transactions keep a deleted category id and show it raw."""
        repository.add_project(project)
        pets = await controller.add_category("Pets", "text-teal-500", "heart")
        controller.select_project(project.id)
        await controller.add_transaction("Vet", 80, TransactionType.EXPENSE, pets.id)
        
        await controller.delete_category(pets.id)
        
        assert controller.transactions[0].category == pets.id
        assert controller.category_label(pets.id) == pets.id
        assert controller.expense_breakdown()[0].name == pets.id
    
    @pytest.mark.asyncio
    async def test_no_push_when_signed_out(self, controller, gateway):
        await controller.create_project("Household")
        await controller.wait_for_pending_sync()
        assert gateway.push_count == 0


class TestLoginAndSync:
    """Tests for the sign-in and last-writer-wins flows."""
    
    @pytest.mark.asyncio
    async def test_first_login_creates_remote(self, controller, gateway):
        """Test that an empty store and no remote file pushes the seed data."""
        assert await controller.login() is True
        
        assert controller.is_authenticated
        assert gateway.push_count == 1
        assert gateway.remote.projects == []
        assert len(gateway.remote.categories) == 9
        assert ActivityEventType.REMOTE_INITIALIZED in event_types(controller)
    
    @pytest.mark.asyncio
    async def test_login_pull_replaces_local(self, controller, repository, gateway, project, make_transaction):
        """Test that remote data wins wholesale on login."""
        repository.add_project(project)
        for i in range(3):
            repository.add_transaction(make_transaction("p1", title=f"Local {i}"))
        gateway.remote = AppData(
            projects=[project],
            transactions=[make_transaction("p1", title=f"Remote {i}") for i in range(5)],
            categories=[Category(id="other", name="Other", is_default=True)],
        )
        controller.select_project("p1")
        
        assert await controller.login() is True
        
        assert len(repository.list_transactions()) == 5
        assert [t.title for t in controller.transactions][0] == "Remote 0"
        assert [c.id for c in controller.categories] == ["other"]
        assert gateway.push_count == 0
    
    @pytest.mark.asyncio
    async def test_pull_drops_missing_active_project(self, controller, repository, gateway, project):
        repository.add_project(project)
        controller.select_project("p1")
        gateway.remote = AppData(projects=[], transactions=[], categories=[])
        
        await controller.login()
        
        assert controller.active_project is None
        assert controller.transactions == []
    
    @pytest.mark.asyncio
    async def test_login_failure(self, controller, gateway):
        gateway.fail_login = True
        
        assert await controller.login() is False
        
        assert controller.error_message == LOGIN_FAILED_MESSAGE
        assert controller.session.state == SessionState.READY
        assert ActivityEventType.AUTH_FAILED in event_types(controller)
    
    @pytest.mark.asyncio
    async def test_pull_failure_keeps_local_data(self, controller, repository, gateway, project):
        repository.add_project(project)
        gateway.fail_pull = True
        
        assert await controller.login() is False
        
        assert controller.error_message == SYNC_FAILED_MESSAGE
        assert controller.is_syncing is False
        assert repository.list_projects() == [project]
    
    @pytest.mark.asyncio
    async def test_mutation_pushes_after_commit(self, controller, gateway):
        """Test that a signed-in change is saved locally and then pushed."""
        await controller.login()
        pushes_after_login = gateway.push_count
        
        project = await controller.create_project("Household")
        await controller.wait_for_pending_sync()
        
        assert gateway.push_count == pushes_after_login + 1
        assert [p.id for p in gateway.remote.projects] == [project.id]
        assert ActivityEventType.SNAPSHOT_PUSHED in event_types(controller)
    
    @pytest.mark.asyncio
    async def test_background_push_failure(self, controller, repository, gateway):
        """Test that a failed push reports an error and keeps the local commit."""
        await controller.login()
        gateway.fail_push = True
        
        project = await controller.create_project("Household")
        await controller.wait_for_pending_sync()
        
        assert controller.error_message == SYNC_FAILED_MESSAGE
        assert repository.list_projects() == [project]
        assert ActivityEventType.SYNC_FAILED in event_types(controller)
        
        controller.dismiss_error()
        assert controller.error_message is None
    
    @pytest.mark.asyncio
    async def test_successful_sync_clears_error(self, controller, gateway):
        await controller.login()
        gateway.fail_push = True
        await controller.create_project("Household")
        await controller.wait_for_pending_sync()
        assert controller.error_message == SYNC_FAILED_MESSAGE
        
        gateway.fail_push = False
        assert await controller.sync() is True
        assert controller.error_message is None
    
    @pytest.mark.asyncio
    async def test_manual_push(self, controller, gateway):
        await controller.login()
        assert await controller.sync() is True
        assert gateway.push_count == 2
    
    @pytest.mark.asyncio
    async def test_sync_when_signed_out_does_nothing(self, controller, gateway):
        assert await controller.sync(pull=True) is False
        assert gateway.push_count == 0
        assert controller.error_message is None
    
    @pytest.mark.asyncio
    async def test_logout(self, controller, gateway):
        await controller.login()
        await controller.logout()
        
        assert controller.is_authenticated is False
        await controller.create_project("Offline")
        await controller.wait_for_pending_sync()
        assert gateway.push_count == 1
    
    @pytest.mark.asyncio
    async def test_local_mode(self, repository, disabled_advisor, make_gateway):
        """Test that an unconfigured gateway leaves the app fully local."""
        controller = FinanceController(
            repository=repository,
            gateway=make_gateway(configured=False),
            advisor=disabled_advisor,
        )
        assert controller.sync_enabled is False
        assert controller.session.state == SessionState.UNINITIALIZED
        await controller.create_project("Household")
        assert len(repository.list_projects()) == 1

class TestSyncStorageFailures:
    """Tests for local storage failures during sync."""
    
    @pytest.fixture
    def failing_controller(self, failing_store, gateway, disabled_advisor):
        return FinanceController(
            repository=FinanceRepository(failing_store),
            gateway=gateway,
            advisor=disabled_advisor,
        )
    
    @pytest.mark.asyncio
    async def test_pull_that_cannot_be_saved_is_not_applied(
        self, failing_controller, failing_store, gateway, project, make_transaction
    ):
        """Test that a half-written pull is undone and reported, not raised."""
        repository = FinanceRepository(failing_store)
        repository.add_project(project)
        repository.add_transaction(make_transaction("p1", title="Local"))
        gateway.remote = AppData(
            projects=[Project(id="remote", name="Remote")],
            transactions=[make_transaction("remote", title="Remote")],
            categories=[],
        )
        failing_store.fail_writes.add(TRANSACTIONS_KEY)
        
        assert await failing_controller.login() is False
        
        assert failing_controller.error_message == SYNC_FAILED_MESSAGE
        assert failing_controller.is_syncing is False
        assert [p.id for p in repository.list_projects()] == ["p1"]
        assert [t.title for t in repository.list_transactions()] == ["Local"]
        assert ActivityEventType.SYNC_FAILED in event_types(failing_controller)
    
    @pytest.mark.asyncio
    async def test_background_push_with_unreadable_store(
        self, failing_controller, failing_store, gateway
    ):
        await failing_controller.login()
        pushes = gateway.push_count
        failing_store.fail_reads.add(CATEGORIES_KEY)
        
        await failing_controller.delete_transaction("missing")
        await failing_controller.wait_for_pending_sync()
        
        assert failing_controller.error_message == SYNC_FAILED_MESSAGE
        assert gateway.push_count == pushes



class TestAdvisory:
    
    @pytest.fixture
    def model(self):
        model = MagicMock()
        model.generate_content_async = AsyncMock(return_value=MagicMock(text="Spend less on coffee."))
        return model
    
    @pytest.fixture
    def ai_controller(self, repository, gateway, model):
        advisor = FinancialAdvisor(settings=GeminiSettings(api_key=None), model=model)
        return FinanceController(repository=repository, gateway=gateway, advisor=advisor)
    
    @pytest.mark.asyncio
    async def test_insight_cleared_on_mutation(self, ai_controller, repository, project):
        repository.add_project(project)
        ai_controller.select_project("p1")
        await ai_controller.add_transaction("Coffee", 4.5, TransactionType.EXPENSE, "food")
        
        assert await ai_controller.analyze_active_project() == "Spend less on coffee."
        assert ai_controller.ai_insight == "Spend less on coffee."
        
        await ai_controller.add_transaction("Tea", 3, TransactionType.EXPENSE, "food")
        assert ai_controller.ai_insight is None
    
    @pytest.mark.asyncio
    async def test_analyze_without_project(self, ai_controller):
        assert await ai_controller.analyze_active_project() is None
    
    @pytest.mark.asyncio
    async def test_suggest_category(self, ai_controller, model):
        model.generate_content_async.return_value = MagicMock(text="food")
        assert await ai_controller.suggest_category("Burger") == "food"
        assert await ai_controller.suggest_category("  ") is None
    
    @pytest.mark.asyncio
    async def test_disabled_advisor_messages(self, controller, repository, project):
        repository.add_project(project)
        controller.select_project("p1")
        assert controller.advisor_enabled is False
        insight = await controller.analyze_active_project()
        assert insight.startswith("AI services are currently unavailable")


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
