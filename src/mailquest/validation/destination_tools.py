"""Destination tool purchase validation."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from mailquest.catalog.destination_tools import DestinationTool
from mailquest.models.session import Destination


class ToolPurchaseReason(str, Enum):
    ALREADY_OWNED = "already_owned"
    MISSING_DEPENDENCIES = "missing_dependencies"
    TOOL_UNAVAILABLE_FOR_KINGDOM = "tool_unavailable_for_kingdom"
    INSUFFICIENT_BUDGET = "insufficient_budget"


@dataclass(frozen=True)
class ToolPurchaseValidation:
    can_purchase: bool
    reason: Optional[ToolPurchaseReason] = None
    missing_dependencies: tuple[str, ...] = ()
    unavailable_reason: Optional[str] = None
    required_credits: Optional[int] = None
    available_credits: Optional[int] = None


def validate_tool_purchase(destination: Destination, tool: DestinationTool) -> ToolPurchaseValidation:
    """Check already_owned, dependencies, kingdom availability, then budget."""
    if tool.id in destination.owned_tools:
        return ToolPurchaseValidation(False, ToolPurchaseReason.ALREADY_OWNED)

    missing = [dep for dep in tool.requires if dep not in destination.owned_tools]
    if missing:
        return ToolPurchaseValidation(
            False, ToolPurchaseReason.MISSING_DEPENDENCIES, missing_dependencies=tuple(missing)
        )

    price = tool.price_for(destination.name)
    if price is None:
        return ToolPurchaseValidation(
            False,
            ToolPurchaseReason.TOOL_UNAVAILABLE_FOR_KINGDOM,
            unavailable_reason=tool.unavailable_reason.get(destination.name),
        )

    if destination.budget < price:
        return ToolPurchaseValidation(
            False,
            ToolPurchaseReason.INSUFFICIENT_BUDGET,
            required_credits=price,
            available_credits=destination.budget,
        )

    return ToolPurchaseValidation(True)


def tool_error_message(validation: ToolPurchaseValidation) -> str:
    if validation.can_purchase:
        return ""
    reason = validation.reason
    if reason == ToolPurchaseReason.ALREADY_OWNED:
        return "This tool is already owned"
    if reason == ToolPurchaseReason.MISSING_DEPENDENCIES:
        return f"Missing required tools: {', '.join(validation.missing_dependencies)}"
    if reason == ToolPurchaseReason.TOOL_UNAVAILABLE_FOR_KINGDOM:
        suffix = f": {validation.unavailable_reason}" if validation.unavailable_reason else ""
        return f"Tool not available for this destination{suffix}"
    if reason == ToolPurchaseReason.INSUFFICIENT_BUDGET:
        return f"Insufficient budget. Need {validation.required_credits}, have {validation.available_credits}"
    return "Cannot purchase this tool"
