"""AI playlist planning and assembly"""

from .plan import PlaylistPlan, sanitize_plan
from .json_extraction import (
    extract_json,
    parse_direct,
    parse_fenced_block,
    parse_brace_span,
    STRATEGIES,
)
from .generator import PlanGenerator, TEST_MODE_PLAN
from .assembly import (
    AssemblyResult,
    PlaylistAssembler,
    ProgressEvent,
    generate_and_assemble,
)

__all__ = [
    "PlaylistPlan",
    "sanitize_plan",
    "extract_json",
    "parse_direct",
    "parse_fenced_block",
    "parse_brace_span",
    "STRATEGIES",
    "PlanGenerator",
    "TEST_MODE_PLAN",
    "AssemblyResult",
    "PlaylistAssembler",
    "ProgressEvent",
    "generate_and_assemble",
]
