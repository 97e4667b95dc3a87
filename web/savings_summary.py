"""
Procurement Savings Summary.

Computes the dashboard figures (totals, per-manager breakdown, team
hierarchy and vendor directory) from parsed procurement records.
Spend is in INR Lakhs; savings percentages are plain numbers (20 = 20%).
"""

from __future__ import annotations

import math
from typing import Any, Dict, List, Optional, Sequence

from procurement_mapper.schema import ProcurementRecord

UNASSIGNED = "Unassigned"


class SavingsSummary:
    """Aggregate procurement records into dashboard figures."""

    @staticmethod
    def safe_divide(
        numerator: Optional[float],
        denominator: Optional[float],
        default: Optional[float] = None,
    ) -> Optional[float]:
        """Safely divide two numbers, returning *default* if invalid."""
        if numerator is None or denominator is None:
            return default
        if denominator == 0:
            return default
        result = numerator / denominator
        if math.isnan(result) or math.isinf(result):
            return default
        return result

    @staticmethod
    def _savings_value(spend: float, percent: float) -> float:
        return spend * percent / 100

    @staticmethod
    def _round(value: Optional[float]) -> Optional[float]:
        return None if value is None else round(value, 2)

    def summarize(self, records: Sequence[ProcurementRecord]) -> Dict[str, Any]:
        """Return every dashboard section for *records*.

        {
            "totals": {...},
            "managers": {...},
            "hierarchy": [...],
            "vendors": {...},
        }
        """
        return {
            "totals": self.totals(records),
            "managers": self.by_manager(records),
            "hierarchy": self.hierarchy(records),
            "vendors": self.vendor_directory(records),
        }

    def totals(self, records: Sequence[ProcurementRecord]) -> Dict[str, Any]:
        """Sheet-wide totals."""
        spend = sum(r.avg_spent for r in records)
        target_value = sum(self._savings_value(r.avg_spent, r.target_savings) for r in records)
        achieved_value = sum(
            self._savings_value(r.avg_spent, r.achieved_savings) for r in records
        )
        weighted_achieved = self.safe_divide(achieved_value, spend)
        vendor_entries = sum(len(r.vendors) for r in records)
        unique_vendors = {v.casefold() for r in records for v in r.vendors}

        return {
            "categories": len(records),
            "part_codes": sum(r.no_of_part_codes for r in records),
            "annual_spend": self._round(spend),
            "target_savings_value": self._round(target_value),
            "achieved_savings_value": self._round(achieved_value),
            "achieved_savings_percentage": self._round(
                weighted_achieved * 100 if weighted_achieved is not None else None
            ),
            "achievement_rate": self._round(self.safe_divide(achieved_value, target_value)),
            "vendor_entries": vendor_entries,
            "unique_vendors": len(unique_vendors),
        }

    def by_manager(self, records: Sequence[ProcurementRecord]) -> Dict[str, Dict[str, Any]]:
        """Per-manager breakdown, in order of first appearance."""
        groups: Dict[str, List[ProcurementRecord]] = {}
        for r in records:
            groups.setdefault(r.manager or UNASSIGNED, []).append(r)

        result: Dict[str, Dict[str, Any]] = {}
        for manager, items in groups.items():
            members: List[str] = []
            for r in items:
                name = r.member or UNASSIGNED
                if name not in members:
                    members.append(name)
            totals = self.totals(items)
            result[manager] = {
                "members": members,
                "categories": totals["categories"],
                "part_codes": totals["part_codes"],
                "annual_spend": totals["annual_spend"],
                "target_savings_value": totals["target_savings_value"],
                "achieved_savings_value": totals["achieved_savings_value"],
                "vendor_entries": totals["vendor_entries"],
            }
        return result

    def hierarchy(self, records: Sequence[ProcurementRecord]) -> List[Dict[str, Any]]:
        """Manager → member → category tree for the org chart."""
        tree: Dict[str, Dict[str, List[Dict[str, Any]]]] = {}
        for r in records:
            members = tree.setdefault(r.manager or UNASSIGNED, {})
            members.setdefault(r.member or UNASSIGNED, []).append({
                "name": r.group_category,
                "vendors": len(r.vendors),
            })

        return [
            {
                "name": manager,
                "children": [
                    {"name": member, "children": categories}
                    for member, categories in members.items()
                ],
            }
            for manager, members in tree.items()
        ]

    @staticmethod
    def vendor_directory(records: Sequence[ProcurementRecord]) -> Dict[str, List[str]]:
        """Vendor → group categories it supplies, in sheet order.

        Vendor names are grouped case-insensitively under the first spelling
        seen.
        """
        spelling: Dict[str, str] = {}
        directory: Dict[str, List[str]] = {}
        for r in records:
            for vendor in r.vendors:
                key = spelling.setdefault(vendor.casefold(), vendor)
                categories = directory.setdefault(key, [])
                if r.group_category and r.group_category not in categories:
                    categories.append(r.group_category)
        return directory
