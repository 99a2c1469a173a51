"""Branch hours and contact tools."""

from dataclasses import dataclass
from datetime import datetime, time
from typing import Any
from zoneinfo import ZoneInfo

from tastychat.providers.llm.base import ToolSchema
from tastychat.tools.models import ToolCategory, ToolContext, ToolExecutionError
from tastychat.tools.registry import ToolRegistry

BRUSSELS = ZoneInfo("Europe/Brussels")


@dataclass(frozen=True)
class Branch:
    name: str
    address: str
    phone: str
    hours: dict[str, str]
    coordinates: tuple[float, float]


_DEFAULT_HOURS = {"mon_fri": "11:00-23:00", "sat_sun": "10:00-00:00"}

BRANCHES: dict[str, Branch] = {
    "angleur": Branch(
        name="Tasty Food Angleur",
        address="123 Rue d'Angleur, 4031 Angleur",
        phone="+32 4 XXX XXXX",
        hours=_DEFAULT_HOURS,
        coordinates=(50.5, 5.5),
    ),
    "saint-gilles": Branch(
        name="Tasty Food Saint-Gilles",
        address="456 Rue de Saint-Gilles, 4000 Liège",
        phone="+32 4 YYY YYYY",
        hours=_DEFAULT_HOURS,
        coordinates=(50.6, 5.6),
    ),
    "wandre": Branch(
        name="Tasty Food Wandre",
        address="789 Rue de Wandre, 4020 Wandre",
        phone="+32 4 ZZZ ZZZZ",
        hours=_DEFAULT_HOURS,
        coordinates=(50.7, 5.7),
    ),
    "seraing": Branch(
        name="Tasty Food Seraing",
        address="101 Rue de Seraing, 4100 Seraing",
        phone="+32 4 AAA AAAA",
        hours=_DEFAULT_HOURS,
        coordinates=(50.6, 5.5),
    ),
}

_BRANCH_INPUT = {
    "type": "object",
    "properties": {
        "branch": {
            "type": "string",
            "description": "Branch name: angleur, saint-gilles, wandre, seraing",
        },
    },
    "required": ["branch"],
}

GET_BRANCH_HOURS = ToolSchema(
    name="get_branch_hours",
    description="Get opening hours for a branch and whether it is open now",
    input_schema=_BRANCH_INPUT,
)

GET_BRANCH_CONTACT = ToolSchema(
    name="get_branch_contact",
    description="Get address, phone and coordinates of a branch",
    input_schema=_BRANCH_INPUT,
)


def _parse(value: str) -> time:
    hour, minute = value.split(":")
    return time(int(hour), int(minute))


def is_open(hours: dict[str, str], now: datetime) -> bool:
    """Whether `now` (local time) falls inside the day's opening range.

    A closing time at or before the opening time means the branch closes
    after midnight.
    """
    key = "sat_sun" if now.weekday() >= 5 else "mon_fri"
    opens, closes = (_parse(part) for part in hours[key].split("-"))
    current = now.time()
    if closes <= opens:
        return current >= opens or current < closes
    return opens <= current < closes


def find_branch(name: str) -> Branch:
    key = "-".join(name.lower().split())
    branch = BRANCHES.get(key)
    if branch is None:
        raise ToolExecutionError(f"Branch not found: {name}")
    return branch


async def get_branch_hours(data: dict[str, Any], context: ToolContext) -> dict[str, Any]:
    branch = find_branch(data["branch"])
    return {
        "name": branch.name,
        "hours": branch.hours,
        "is_open": is_open(branch.hours, context.now().astimezone(BRUSSELS)),
    }


async def get_branch_contact(data: dict[str, Any], _context: ToolContext) -> dict[str, Any]:
    branch = find_branch(data["branch"])
    lat, lng = branch.coordinates
    return {
        "name": branch.name,
        "address": branch.address,
        "phone": branch.phone,
        "coordinates": {"lat": lat, "lng": lng},
    }


def register_branch_tools(registry: ToolRegistry) -> None:
    registry.register(GET_BRANCH_HOURS, get_branch_hours, ToolCategory.BRANCH)
    registry.register(GET_BRANCH_CONTACT, get_branch_contact, ToolCategory.BRANCH)
