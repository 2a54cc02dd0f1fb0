"""
Core Data Models for FinTrack

These models define the schemas for everything the app persists
locally and pushes to the remote snapshot file.

DESIGN DECISION: Field names on the wire are camelCase (projectId,
createdAt, iconName, ...) so a snapshot written by any FinTrack client
can be read by any other. Python code uses the snake_case attributes;
always dump with by_alias=True when serializing.
"""

import re
import time
from datetime import date, datetime, timezone
from enum import Enum
from typing import Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CamelModel(BaseModel):
    """Base model serializing with camelCase aliases."""
    
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )
    
    def to_record(self) -> dict:
        """JSON-compatible dict using the wire field names."""
        return self.model_dump(mode="json", by_alias=True)


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class TransactionType(str, Enum):
    """Direction of a transaction."""
    INCOME = "income"
    EXPENSE = "expense"


class CategoryIcon(str, Enum):
    """
    Icons a category can carry.
    
    Stored categories keep their raw token; rendering goes through
    from_token() so an unknown token degrades to MORE instead of
    failing a lookup.
    """
    BRIEFCASE = "briefcase"
    ZAP = "zap"
    HOME = "home"
    CAR = "car"
    COFFEE = "coffee"
    SHOPPING = "shopping"
    FILM = "film"
    HEART = "heart"
    MORE = "more"
    SCHOOL = "school"
    PLANE = "plane"
    GIFT = "gift"
    WIFI = "wifi"
    PHONE = "phone"
    TOOL = "tool"
    
    @classmethod
    def from_token(cls, token: Optional[str]) -> "CategoryIcon":
        try:
            return cls(token)
        except ValueError:
            return cls.MORE
    
    @property
    def emoji(self) -> str:
        return _ICON_EMOJI[self]


_ICON_EMOJI = {
    CategoryIcon.BRIEFCASE: "💼",
    CategoryIcon.ZAP: "⚡",
    CategoryIcon.HOME: "🏠",
    CategoryIcon.CAR: "🚗",
    CategoryIcon.COFFEE: "☕",
    CategoryIcon.SHOPPING: "🛒",
    CategoryIcon.FILM: "🎬",
    CategoryIcon.HEART: "❤️",
    CategoryIcon.MORE: "⋯",
    CategoryIcon.SCHOOL: "🎓",
    CategoryIcon.PLANE: "✈️",
    CategoryIcon.GIFT: "🎁",
    CategoryIcon.WIFI: "📶",
    CategoryIcon.PHONE: "📱",
    CategoryIcon.TOOL: "🔧",
}


class CategoryColor(str, Enum):
    """
    Colour palette for categories.
    
    Values are the tokens stored in snapshots. Unknown tokens map to GRAY.
    """
    RED = "text-red-500"
    ORANGE = "text-orange-500"
    AMBER = "text-amber-500"
    AMBER_DARK = "text-amber-700"
    GREEN = "text-green-500"
    EMERALD = "text-emerald-500"
    TEAL = "text-teal-500"
    CYAN = "text-cyan-500"
    BLUE = "text-blue-500"
    INDIGO = "text-indigo-500"
    VIOLET = "text-violet-500"
    PURPLE = "text-purple-500"
    FUCHSIA = "text-fuchsia-500"
    PINK = "text-pink-500"
    ROSE = "text-rose-500"
    GRAY = "text-gray-500"
    
    @classmethod
    def from_token(cls, token: Optional[str]) -> "CategoryColor":
        try:
            return cls(token)
        except ValueError:
            return cls.GRAY
    
    @property
    def label(self) -> str:
        return self.name.replace("_", " ").title()
    
    @property
    def hex(self) -> str:
        return _COLOR_HEX[self]


_COLOR_HEX = {
    CategoryColor.RED: "#ef4444",
    CategoryColor.ORANGE: "#f97316",
    CategoryColor.AMBER: "#f59e0b",
    CategoryColor.AMBER_DARK: "#b45309",
    CategoryColor.GREEN: "#22c55e",
    CategoryColor.EMERALD: "#10b981",
    CategoryColor.TEAL: "#14b8a6",
    CategoryColor.CYAN: "#06b6d4",
    CategoryColor.BLUE: "#3b82f6",
    CategoryColor.INDIGO: "#6366f1",
    CategoryColor.VIOLET: "#8b5cf6",
    CategoryColor.PURPLE: "#a855f7",
    CategoryColor.FUCHSIA: "#d946ef",
    CategoryColor.PINK: "#ec4899",
    CategoryColor.ROSE: "#f43f5e",
    CategoryColor.GRAY: "#6b7280",
}


# =============================================================================
# ENTITIES
# =============================================================================

class Project(CamelModel):
    """
    A budget container that transactions are logged against.
    
    Projects are never edited or deleted once created.
    """
    
    id: str = Field(
        default_factory=lambda: str(uuid4()),
        min_length=1,
        description="Unique project ID"
    )
    name: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="Project name"
    )
    description: str = Field(
        default="",
        max_length=1000,
    )
    created_at: datetime = Field(
        default_factory=_utcnow,
        description="When the project was created"
    )
    currency: str = Field(
        default="USD",
        min_length=3,
        max_length=3,
        description="ISO currency code"
    )
    
    @field_validator("currency")
    @classmethod
    def upper_currency(cls, v: str) -> str:
        return v.upper()
    
    @classmethod
    def create(
        cls,
        name: str,
        description: str = "",
        currency: str = "USD",
    ) -> "Project":
        return cls(name=name, description=description, currency=currency)


class Category(CamelModel):
    """
    A user-visible transaction category.
    
    Built-in categories have fixed literal ids and is_default=True;
    they cannot be deleted. User categories get a slug id.
    """
    
    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1, max_length=100)
    color: str = Field(default=CategoryColor.GRAY.value)
    icon_name: str = Field(default=CategoryIcon.MORE.value)
    is_default: bool = False
    
    @property
    def icon(self) -> CategoryIcon:
        return CategoryIcon.from_token(self.icon_name)
    
    @property
    def palette_color(self) -> CategoryColor:
        return CategoryColor.from_token(self.color)
    
    @staticmethod
    def make_id(name: str, clock_ms: Optional[int] = None) -> str:
        """
        Derive a slug id from a display name.
        
        "Pet Food" -> "pet_food_1234", where the suffix is the last four
        digits of the millisecond clock.
        """
        if clock_ms is None:
            clock_ms = int(time.time() * 1000)
        slug = re.sub(r"[^a-z0-9]", "_", name.strip().lower())
        return f"{slug}_{str(clock_ms)[-4:]}"
    
    @classmethod
    def create(
        cls,
        name: str,
        color: str = CategoryColor.INDIGO.value,
        icon_name: str = CategoryIcon.MORE.value,
    ) -> "Category":
        return cls(
            id=cls.make_id(name),
            name=name,
            color=color,
            icon_name=icon_name,
            is_default=False,
        )
    
    @staticmethod
    def label_for(category_id: str, categories: list["Category"]) -> str:
        """Display name for a category id; dangling ids render as themselves."""
        for category in categories:
            if category.id == category_id:
                return category.name
        return category_id


class Transaction(CamelModel):
    """
    A single income or expense entry within a project.
    
    The category id is not checked against the current category set;
    it may dangle after the category is deleted.
    """
    
    id: str = Field(
        default_factory=lambda: str(uuid4()),
        min_length=1,
    )
    project_id: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(default="", max_length=1000)
    amount: float = Field(
        ...,
        ge=0,
        allow_inf_nan=False,
        description="Non-negative, finite amount in the project currency"
    )
    type: TransactionType
    date: date
    category: str = Field(..., min_length=1)
    
    @field_validator("description", mode="before")
    @classmethod
    def none_to_empty(cls, v):
        return "" if v is None else v
    
    @property
    def signed_amount(self) -> float:
        return self.amount if self.type == TransactionType.INCOME else -self.amount
    
    @classmethod
    def create(
        cls,
        project_id: str,
        title: str,
        amount,
        type: TransactionType,
        category: str,
        on: Optional[date] = None,
        description: str = "",
    ) -> "Transaction":
        return cls(
            project_id=project_id,
            title=title,
            description=description,
            amount=amount,
            type=type,
            date=on or date.today(),
            category=category,
        )


class AppData(CamelModel):
    """
    Full snapshot of the local data set - the unit of remote sync.
    
    A collection missing from a parsed payload is absent from
    model_fields_set, which is how restore() knows to leave it alone.
    """
    
    projects: list[Project] = Field(default_factory=list)
    transactions: list[Transaction] = Field(default_factory=list)
    categories: list[Category] = Field(default_factory=list)
    last_synced: Optional[datetime] = Field(
        default=None,
        description="Informational only; never used to order snapshots"
    )
    
    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)


# =============================================================================
# SUMMARY MODELS
# =============================================================================

class FinancialSummary(BaseModel):
    """Totals for a set of transactions."""
    
    total_income: float = 0.0
    total_expense: float = 0.0
    transaction_count: int = 0
    
    @property
    def balance(self) -> float:
        return self.total_income - self.total_expense


class CategoryBreakdown(BaseModel):
    """Expense total for one category id."""
    
    category_id: str
    name: str
    total: float
    color: CategoryColor = CategoryColor.GRAY


# =============================================================================
# SEED DATA
# =============================================================================

DEFAULT_CATEGORIES: tuple[Category, ...] = (
    Category(id="salary", name="Salary/Wages", icon_name="briefcase", color="text-green-500", is_default=True),
    Category(id="freelance", name="Freelance", icon_name="zap", color="text-blue-500", is_default=True),
    Category(id="housing", name="Housing", icon_name="home", color="text-orange-500", is_default=True),
    Category(id="transport", name="Transport", icon_name="car", color="text-indigo-500", is_default=True),
    Category(id="food", name="Food & Dining", icon_name="coffee", color="text-amber-700", is_default=True),
    Category(id="shopping", name="Shopping", icon_name="shopping", color="text-pink-500", is_default=True),
    Category(id="entertainment", name="Entertainment", icon_name="film", color="text-purple-500", is_default=True),
    Category(id="health", name="Health", icon_name="heart", color="text-red-500", is_default=True),
    Category(id="other", name="Other", icon_name="more", color="text-gray-500", is_default=True),
)

FALLBACK_CATEGORY_ID = "other"


def default_categories() -> list[Category]:
    """Fresh copies of the seed categories."""
    return [category.model_copy() for category in DEFAULT_CATEGORIES]
