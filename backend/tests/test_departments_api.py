from types import SimpleNamespace

import pytest

from app.services.departments import DEPARTMENT_CATALOGUE, sort_departments


def test_list_departments_in_display_order(client):
    response = client.get("/api/departments")

    assert response.status_code == 200
    departments = response.json()["departments"]
    assert [d["name"] for d in departments] == [
        "Obstetrics",
        "Gynecology",
        "Internal Medicine",
        "Pediatrics",
        "Surgery",
        "Dentistry",
    ]
    surgery = next(d for d in departments if d["name"] == "Surgery")
    assert {"General Surgery", "Cardiothoracic Surgery"} <= {s["name"] for s in surgery["subspecialties"]}
    assert response.headers["Cache-Control"].startswith("public, max-age=3600")


def test_sort_puts_departments_with_subspecialties_first():
    def dept(name, subs=0):
        return SimpleNamespace(name=name, subspecialties=[object()] * subs)

    ordered = sort_departments(
        [
            dept("Dentistry"),
            dept("Anatomy"),
            dept("Zoology", 2),
            dept("Gynecology"),
            dept("Cardiology", 1),
            dept("Obstetrics"),
        ]
    )

    assert [d.name for d in ordered] == [
        "Obstetrics",
        "Gynecology",
        "Cardiology",
        "Zoology",
        "Anatomy",
        "Dentistry",
    ]


@pytest.mark.asyncio
async def test_find_department_by_subspecialty(department_repository):
    by_name = await department_repository.find_department("Pediatrics")
    by_subspecialty = await department_repository.find_department("Cardiothoracic Surgery")
    missing = await department_repository.find_department("Astrology")

    assert by_name.name == "Pediatrics"
    assert by_subspecialty.name == "Surgery"
    assert missing is None


def test_catalogue_names_are_unique():
    names = [name for name, _description, _subs in DEPARTMENT_CATALOGUE]

    assert len(names) == len(set(names))
