#!/usr/bin/env python3
# scripts/seed_directory.py

import asyncio

from staff_directory.core.config import settings
from staff_directory.core.errors import Conflict
from staff_directory.db.mongodb import mongodb
from staff_directory.domains.employees.repository import EmployeeRepository
from staff_directory.domains.employees.service import employee_service
from staff_directory.domains.users.repository import UserRepository
from staff_directory.domains.users.service import user_service

SAMPLE_EMPLOYEES = [
    ("Ada Lovelace", "Engineer", 9500),
    ("Grace Hopper", "Engineer", 9800),
    ("Alan Turing", "Researcher", 9100),
    ("Katherine Johnson", "Analyst", 8700),
    ("Linus Pauling", "Researcher", 8200),
    ("Margaret Hamilton", "Engineering Manager", 12000),
    ("Barbara Liskov", "Architect", 11500),
    ("Dennis Ritchie", "Engineer", 9300),
    ("Frances Allen", "Analyst", 8600),
    ("Ken Thompson", "Engineer", 9300),
    ("Radia Perlman", "Network Engineer", 9900),
    ("Edsger Dijkstra", "Architect", 11000),
]


async def seed_employees():
    """Create the sample employees through the service, owned by the admin user"""
    admin = await user_service.get_user_by_email(settings.ADMIN_EMAIL)
    principal = await user_service.resolve_principal(admin["_id"])

    created = []
    for index, (name, designation, salary) in enumerate(SAMPLE_EMPLOYEES):
        fields = {
            "name": name,
            "email": f"{name.split()[0].lower()}.{name.split()[-1].lower()}@example.com",
            "phone": f"55500{index:05d}",
            "designation": designation,
            "salary": salary,
        }
        try:
            employee = await employee_service.create_employee(fields, principal)
        except Conflict:
            print(f"Skipped {fields['email']}: already in the directory")
            continue
        print(f"Created employee {employee['_id']} ({name})")
        created.append(employee)

    return created


async def main():
    """Main function to seed the directory"""
    mongodb.connect_to_mongodb()
    try:
        print(f"Seeding {settings.MONGODB_DB} at {settings.MONGODB_URL}...")

        await EmployeeRepository().ensure_indexes()
        await UserRepository().ensure_indexes()
        await user_service.ensure_admin(settings.ADMIN_EMAIL, settings.ADMIN_PASSWORD, settings.ADMIN_NAME)

        employees = await seed_employees()

        print("\nSummary:")
        print(f"  - Employees created: {len(employees)}")
        print(f"  - Employees skipped: {len(SAMPLE_EMPLOYEES) - len(employees)}")
    finally:
        await mongodb.close_mongodb_connection()


if __name__ == "__main__":
    asyncio.run(main())
