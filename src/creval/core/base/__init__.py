# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Input records for an appraisal run: subject, comparables and market data.
"""

from .adjustment import Adjustment, UserAdjustments
from .comparable import Comparable, FinancingTerms, RentalComparable
from .market import (
    ExpenseRatios,
    GrowthAssumptions,
    ImprovedSale,
    LandSale,
    MarketConditions,
    MarketData,
)
from .options import AppraisalOptions
from .property import (
    ConstructionDetails,
    EnvironmentalData,
    IncomeData,
    Lease,
    LegalCharacteristics,
    LocationDetails,
    OperatingExpenses,
    ParkingDetails,
    PhysicalCharacteristics,
    SubjectProperty,
    TransportationAccess,
)

__all__ = [
    "Adjustment",
    "AppraisalOptions",
    "Comparable",
    "ConstructionDetails",
    "EnvironmentalData",
    "ExpenseRatios",
    "FinancingTerms",
    "GrowthAssumptions",
    "ImprovedSale",
    "IncomeData",
    "LandSale",
    "Lease",
    "LegalCharacteristics",
    "LocationDetails",
    "MarketConditions",
    "MarketData",
    "OperatingExpenses",
    "ParkingDetails",
    "PhysicalCharacteristics",
    "RentalComparable",
    "SubjectProperty",
    "TransportationAccess",
    "UserAdjustments",
]
