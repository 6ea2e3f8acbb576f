"""Shared catalog fixtures."""

from decimal import Decimal

import pytest

from catmatch.schemas import CatalogEntry


def make_entry(id: str, name: str, **kwargs) -> CatalogEntry:
    fields = {
        "unit_of_measure": "Each",
        "unit_price": Decimal("10.00"),
        "supplier": "CleanPro Supply",
    }
    fields.update(kwargs)
    return CatalogEntry(id=id, name=name, **fields)


@pytest.fixture
def entry():
    return make_entry


@pytest.fixture
def catalog() -> list[CatalogEntry]:
    return [
        make_entry(
            "prod-1",
            "Heavy-Duty Floor Cleaner Concentrate",
            description="Industrial grade floor cleaner",
            category="Cleaning Supplies",
            unit_of_measure="Gallon",
            unit_price=Decimal("18.50"),
        ),
        make_entry(
            "prod-2",
            "Microfiber Cleaning Cloths",
            description="Professional grade microfiber cloths",
            category="Cleaning Supplies",
            unit_price=Decimal("2.75"),
        ),
        make_entry(
            "prod-3",
            "Disinfectant Spray Bottles",
            description="Commercial disinfectant spray",
            category="Cleaning Supplies",
        ),
        make_entry(
            "prod-4",
            "Trash Can Liners 55gal",
            description="Heavy duty black liners",
            category="Janitorial",
            unit_of_measure="Case",
        ),
        make_entry(
            "prod-5",
            "Nitrile Exam Gloves",
            description="Powder-free disposable gloves",
            category="Safety",
            category_path="PPE > Hand Protection",
            supplier="SafeGuard",
        ),
        make_entry(
            "prod-6",
            "Copy Paper Letter Size",
            description="20lb white paper, 10 reams",
            category="Office Supplies",
            supplier="OfficeMax",
        ),
    ]
