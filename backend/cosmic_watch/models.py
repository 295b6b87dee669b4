from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


# --- Roles ---

class Role(str, Enum):
    OBSERVER = "observer"
    RESEARCHER = "researcher"


# --- Risk bands ---

class RiskLevel(str, Enum):
    LOW = "LOW"
    ELEVATED = "ELEVATED"
    CRITICAL = "CRITICAL"


# --- NEO feed records (NeoWs shape, extra upstream fields pass through) ---

class NearEarthObject(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str
    name: str = ""
    is_potentially_hazardous_asteroid: bool = False
    estimated_diameter: dict[str, Any] = {}
    close_approach_data: list[dict[str, Any]] = []
    risk_score: int = Field(ge=0, le=100, description="Computed at ingest, immutable")


class DisplayNeo(NearEarthObject):
    display_score: int = Field(ge=0, le=100)
    is_verified: bool = False
    researcher_notes: str | None = None
    risk_level: RiskLevel


# --- Researcher overrides ---

class Override(BaseModel):
    score: int = Field(ge=0, le=100)
    notes: str = ""


class OverrideRequest(BaseModel):
    score: int = Field(strict=True, ge=0, le=100, description="Manual risk assessment")
    notes: str = Field(default="", max_length=4000, description="Researcher justification")


class DisplayScore(BaseModel):
    score: int
    verified: bool
    notes: str | None = None


# --- Accounts ---

class SignupRequest(BaseModel):
    email: str = Field(min_length=3, pattern=r"^[^@\s]+@[^@\s]+$")
    password: str = Field(min_length=1)
    role: Role = Role.OBSERVER


class LoginRequest(BaseModel):
    email: str
    password: str


class UserProfile(BaseModel):
    id: str
    username: str
    email: str
    role: Role


class SessionResponse(BaseModel):
    token: str
    user: UserProfile


# --- Watchlist ---

class WatchlistToggleResponse(BaseModel):
    neo_id: str
    watched: bool
    watchlist: list[str]


class WatchlistResponse(BaseModel):
    watchlist: list[str]
    objects: list[DisplayNeo] = []


# --- Dashboard ---

class HazardFilter(str, Enum):
    ALL = "all"
    HAZARDOUS = "hazardous"


class SizeFilter(str, Enum):
    ALL = "all"
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"


class RiskFilter(str, Enum):
    ALL = "all"
    LOW = "low"
    ELEVATED = "elevated"
    CRITICAL = "critical"


class VelocityFilter(str, Enum):
    ALL = "all"
    SLOW = "slow"
    MODERATE = "moderate"
    FAST = "fast"


class SortBy(str, Enum):
    NONE = "none"
    DATE_DESC = "date_desc"
    DATE_ASC = "date_asc"
    RISK_DESC = "risk_desc"
    MISS_ASC = "miss_asc"


class DashboardStats(BaseModel):
    total: int
    hazardous_count: int
    avg_velocity_kph: float
    closest_miss_km: float | None = None


class DashboardPage(BaseModel):
    items: list[DisplayNeo]
    page: int
    total_pages: int
    total_matches: int
    stats: DashboardStats


# --- Orbit scene ---

class OrbitBody(BaseModel):
    id: str
    name: str
    score: int
    level: RiskLevel
    color: str
    orbit_radius: float
    body_radius: float
    labelled: bool = False


class OrbitScene(BaseModel):
    bodies: list[OrbitBody]
    critical_count: int
    elevated_count: int
    low_count: int


# --- Chat relay ---

class ChatRequest(BaseModel):
    message: str = Field(min_length=1, max_length=8000)


class ChatResponse(BaseModel):
    text: str


# --- API responses ---

class HealthResponse(BaseModel):
    status: str = "ok"
