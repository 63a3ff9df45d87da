"""Family grouping, budgeting and assembly."""

from .assembler import FamilyAssembler, FamilyDocument
from .budget import BudgetEstimate, TokenBudgetEstimator
from .cleanup import FamilyCleaner
from .reader import FamilyGroup, FamilyReader, Found, NotFound, ToolContent
from .stitcher import stitch

__all__ = [
    "BudgetEstimate",
    "FamilyAssembler",
    "FamilyCleaner",
    "FamilyDocument",
    "FamilyGroup",
    "FamilyReader",
    "Found",
    "NotFound",
    "TokenBudgetEstimator",
    "ToolContent",
    "stitch",
]
