# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Creval Core Primitives

Building blocks shared by every component: the immutable base model,
constrained numeric types, enumerations, settings and assumption tracking.
"""

from .assumptions import Assumption, AssumptionTracker
from .enums import (
    AdjustmentKind,
    AdjustmentRisk,
    ApproachKind,
    AssumptionSource,
    ConditionEnum,
    ConfidenceLevel,
    ConstructionTypeEnum,
    CostApplicability,
    ExteriorFinishEnum,
    FinancingTypeEnum,
    FloorPlanEnum,
    HVACTypeEnum,
    ImprovedUseEnum,
    MarketConditionEnum,
    MarketSupport,
    PropertyRightsEnum,
    PropertyTypeEnum,
    RoofTypeEnum,
    SaleConditionEnum,
    Severity,
    VarianceRating,
)
from .model import Model
from .settings import (
    AppraisalSettings,
    ComparableSettings,
    CostSettings,
    CurableItemRule,
    EngineSettings,
    ExpenseRatioTable,
    HBUSettings,
    IncomeSettings,
    Modification,
    ReconciliationSettings,
    SalesComparisonSettings,
    ShortLivedComponent,
    UseProfile,
    ValidationSettings,
)
from .types import (
    ConditionInput,
    FloatBetween0And1,
    PositiveFloat,
    PositiveInt,
    Score0To100,
)

__all__ = [
    "AdjustmentKind",
    "AdjustmentRisk",
    "AppraisalSettings",
    "ApproachKind",
    "Assumption",
    "AssumptionSource",
    "AssumptionTracker",
    "ComparableSettings",
    "ConditionEnum",
    "ConditionInput",
    "ConfidenceLevel",
    "ConstructionTypeEnum",
    "CostApplicability",
    "CostSettings",
    "CurableItemRule",
    "EngineSettings",
    "ExpenseRatioTable",
    "ExteriorFinishEnum",
    "FinancingTypeEnum",
    "FloatBetween0And1",
    "FloorPlanEnum",
    "HBUSettings",
    "HVACTypeEnum",
    "ImprovedUseEnum",
    "IncomeSettings",
    "MarketConditionEnum",
    "MarketSupport",
    "Model",
    "Modification",
    "PositiveFloat",
    "PositiveInt",
    "PropertyRightsEnum",
    "PropertyTypeEnum",
    "ReconciliationSettings",
    "RoofTypeEnum",
    "SaleConditionEnum",
    "SalesComparisonSettings",
    "Score0To100",
    "Severity",
    "ShortLivedComponent",
    "UseProfile",
    "ValidationSettings",
    "VarianceRating",
]
