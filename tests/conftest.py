"""
Shared fixtures: the legacy procurement sheet in CSV form.
"""

from __future__ import annotations

import pytest


HEADER = (
    "Sr. No,Manager,Member,Group Category,No of part codes,"
    "Average Spent per Year (INR Lakhs),Target Savings,Achieved Savings,"
    "New Vendor-1,New Vendor-2,New Vendor-3"
)


@pytest.fixture
def sheet_csv() -> str:
    """Three data rows; row 2 has multi-line vendor cells, row 3 a blank vendor."""
    return "\n".join([
        HEADER,
        "1,Gaurav,Maninder,Switchgear,254,175,20%,25%,Eaton,General Electric,L&T",
        '2,Gaurav,Maninder,RTD & Thermocouples,18,2,20%,,"DIGITEK SOLUTION\n Mr.Pratik",'
        '"SIGNATURE TECHNOLOGY\n Mr.89810 07044",',
        '3,Gaurav,Maninder,"Cables & Wires",71,1525,20%,23%,"POLYVION CABLES, Noida",,Havells',
        "",
    ])
