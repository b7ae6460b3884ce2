"""Module: seed_catalog.

Seed a small routine-immunization catalog, plus demo clinics and immunization
logs, for
local development:

    python -m vaxcat.scripts.seed_catalog
"""

import random
from datetime import datetime, time

from faker import Faker
from sqlalchemy import select

from vaxcat.db.init_db import init_db
from vaxcat.db.models.vaccine_lineage import VaccineLineage
from vaxcat.db.session import SessionLocal
from vaxcat.schemas.booking import ClinicCreate
from vaxcat.schemas.catalog import DoseCreate, ImmunizationLogCreate, VaccineCreate
from vaxcat.services.clinics import create_clinic
from vaxcat.services.dose_schedule import create_dose
from vaxcat.services.immunization_log import create_log
from vaxcat.services.vaccine_catalog import create_vaccine


fake = Faker()

SEED_ACTOR = "seed-script"

CATALOG = [
    {
        "vaccine": {
            "name": "Engerix-B",
            "genericName": "Hepatitis B vaccine (recombinant)",
            "manufacturer": "GlaxoSmithKline",
            "cvxCode": "08",
            "presentation": "prefilled-syringe",
            "volume": {"value": 0.5, "unit": "mL"},
            "storageRequirements": {"minTemp": 2, "maxTemp": 8, "requiresRefrigeration": True},
            "totalDoses": 3,
            "approvedRegions": [{"country": "US", "regulatoryBody": "FDA"}],
        },
        "doses": [
            {"doseNumber": 1, "minAge": {"value": 0, "unit": "days"}},
            {"doseNumber": 2, "minAge": {"value": 1, "unit": "months"}, "intervalFromPrevious": {"minDays": 28}},
            {"doseNumber": 3, "minAge": {"value": 6, "unit": "months"}, "intervalFromPrevious": {"minDays": 56}},
        ],
    },
    {
        "vaccine": {
            "name": "M-M-R II",
            "genericName": "Measles, mumps and rubella virus vaccine, live",
            "manufacturer": "Merck",
            "cvxCode": "03",
            "presentation": "vial",
            "volume": {"value": 0.5, "unit": "mL"},
            "storageRequirements": {"minTemp": -50, "maxTemp": 8, "requiresRefrigeration": True},
            "totalDoses": 2,
            "approvedRegions": [{"country": "US", "regulatoryBody": "FDA"}],
            "contraindications": [
                {"condition": "Severe immunodeficiency", "severity": "absolute"},
                {"condition": "Pregnancy", "severity": "absolute"},
            ],
        },
        "doses": [
            {"doseNumber": 1, "minAge": {"value": 12, "unit": "months"}},
            {"doseNumber": 2, "minAge": {"value": 4, "unit": "years"}, "intervalFromPrevious": {"minDays": 28}},
        ],
    },
    {
        "vaccine": {
            "name": "FluMist Quadrivalent",
            "genericName": "Influenza vaccine, live, intranasal",
            "manufacturer": "AstraZeneca",
            "cvxCode": "149",
            "presentation": "nasal-spray",
            "volume": {"value": 0.2, "unit": "mL"},
            "totalDoses": 1,
            "approvedRegions": [{"country": "US", "regulatoryBody": "FDA"}, {"country": "GB", "regulatoryBody": "MHRA"}],
        },
        "doses": [
            {"doseNumber": 1, "minAge": {"value": 2, "unit": "years"}, "priority": "routine"},
        ],
    },
]


def seed_catalog(session) -> list:
    vaccines = []
    for entry in CATALOG:
        payload = VaccineCreate.model_validate(entry["vaccine"])
        exists = session.execute(
            select(VaccineLineage.lineage_id).where(VaccineLineage.cvx_code == payload.cvx_code)
        ).first()
        if exists:
            print(f"Skipping {payload.name}, already seeded")
            continue

        vaccine = create_vaccine(session, payload, SEED_ACTOR)
        for dose in entry["doses"]:
            create_dose(session, vaccine.vaccine_id, DoseCreate.model_validate(dose), SEED_ACTOR)
        vaccines.append(vaccine)
    return vaccines


def seed_clinics(session, n: int = 4) -> list:
    clinics = []
    for _ in range(n):
        clinics.append(
            create_clinic(
                session,
                ClinicCreate(
                    clinic_name=f"{fake.last_name()} Family Clinic",
                    address=fake.street_address(),
                    city=fake.city(),
                    district=fake.state(),
                    phone=fake.phone_number(),
                    email=fake.company_email(),
                    clinic_type=random.choice(["Public", "Private"]),
                    open_days=["Monday", "Tuesday", "Wednesday", "Thursday", "Friday"],
                    open_time="08:00",
                    close_time=random.choice(["16:00", "17:30"]),
                ),
                SEED_ACTOR,
            )
        )
    return clinics


def seed_immunization_logs(session, vaccines: list, clinics: list, n_patients: int = 20) -> int:
    # Demo history: each patient gets a first dose of a random vaccine.
    if not vaccines or not clinics:
        return 0

    clinic_names = [c.clinic_name for c in clinics]
    count = 0
    for _ in range(n_patients):
        vaccine = random.choice(vaccines)
        given = fake.date_between(start_date="-2y", end_date="today")
        create_log(
            session,
            ImmunizationLogCreate(
                patient_id=fake.uuid4(),
                vaccine_id=vaccine.vaccine_id,
                dose_number=1,
                date_administered=datetime.combine(given, time(hour=random.randint(8, 17))),
                clinic=random.choice(clinic_names),
                notes=fake.sentence(nb_words=8) if random.random() < 0.3 else None,
            ),
            SEED_ACTOR,
        )
        count += 1
    return count


if __name__ == "__main__":
    init_db()
    session = SessionLocal()
    try:
        print("Seeding vaccine catalog...")
        vaccines = seed_catalog(session)

        print("Seeding clinics...")
        clinics = seed_clinics(session)

        print("Seeding immunization logs...")
        log_n = seed_immunization_logs(session, vaccines, clinics)

        print(f"Done. vaccines={len(vaccines)}, clinics={len(clinics)}, immunization_logs={log_n}")
    finally:
        session.close()
