"""Proactive help: behavior detectors, throttling and localized messages."""

from tastychat.proactive.engine import ProactiveHelpEngine
from tastychat.proactive.messages import format_message
from tastychat.proactive.models import OpportunityType, ProactiveOpportunity
from tastychat.proactive.tracker import ProactiveHelpTracker

__all__ = [
    "OpportunityType",
    "ProactiveHelpEngine",
    "ProactiveHelpTracker",
    "ProactiveOpportunity",
    "format_message",
]
