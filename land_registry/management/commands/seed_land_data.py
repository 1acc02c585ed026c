"""
Land Administration Back Office - Data Seeding Script
Populates officers, citizens, approved parcels and a few in-flight transfers

Usage: python manage.py seed_land_data [--clear]
"""

import random
from decimal import Decimal

from django.core.management.base import BaseCommand
from django.db import transaction

from land_registry import lands, transfers
from land_registry.models import AuditLog, LandRecord, LandTransfer, OwnershipHistory, User

DISTRICTS = {
    'Gasabo': ['Kimironko', 'Remera', 'Kacyiru'],
    'Kicukiro': ['Niboye', 'Kagarama', 'Gikondo'],
    'Nyarugenge': ['Nyamirambo', 'Muhima', 'Kimisagara'],
}

CITIZENS = [
    ('alice.uwase', 'Alice', 'Uwase'),
    ('jean.mugisha', 'Jean', 'Mugisha'),
    ('claudine.ingabire', 'Claudine', 'Ingabire'),
    ('eric.niyonzima', 'Eric', 'Niyonzima'),
    ('grace.mukamana', 'Grace', 'Mukamana'),
    ('patrick.habimana', 'Patrick', 'Habimana'),
]

# Kigali city centre
KIGALI_LAT = -1.9441
KIGALI_LON = 30.0619


class Command(BaseCommand):
    help = 'Seeds the database with land records and transfers'

    def add_arguments(self, parser):
        parser.add_argument(
            '--clear',
            action='store_true',
            help='Clear existing land data before seeding',
        )
        parser.add_argument(
            '--parcels',
            type=int,
            default=12,
            help='Number of parcels to register',
        )

    def handle(self, *args, **options):
        if options['clear']:
            self.stdout.write(self.style.WARNING('Clearing existing land data...'))
            self.clear_data()

        self.stdout.write(self.style.SUCCESS('Starting land data seeding...'))

        officers = self.seed_officers()
        citizens = self.seed_citizens()
        parcels = self.seed_parcels(citizens, officers['registrar'], options['parcels'])
        self.seed_transfers(parcels, citizens)

        self.stdout.write(self.style.SUCCESS('Land data seeding completed'))

    def clear_data(self):
        with transaction.atomic():
            OwnershipHistory.objects.all().delete()
            LandTransfer.objects.all().delete()
            LandRecord.objects.all().delete()
            AuditLog.objects.filter(model_name__in=['LandRecord', 'LandTransfer']).delete()

    def seed_officers(self):
        officers = {
            'registrar': self._user('registrar', User.Role.REGISTRAR, 'Registrar', 'General'),
            'system_admin': self._user('sysadmin', User.Role.SYSTEM_ADMIN, 'System', 'Admin'),
        }
        for district in DISTRICTS:
            officers[district] = self._user(
                f"officer.{district.lower()}", User.Role.LAND_OFFICER, 'Land Officer', district, district=district
            )
        self.stdout.write(self.style.SUCCESS(f"Created {len(officers)} officers"))
        return officers

    def seed_citizens(self):
        citizens = []
        for index, (username, first_name, last_name) in enumerate(CITIZENS, 1):
            district = random.choice(list(DISTRICTS))
            citizen = self._user(
                username, User.Role.CITIZEN, first_name, last_name,
                district=district, national_id=f"1199080{index:09d}",
            )
            citizens.append(citizen)
        self.stdout.write(self.style.SUCCESS(f"Created {len(citizens)} citizens"))
        return citizens

    def seed_parcels(self, citizens, registrar, count):
        parcels = []
        for index in range(1, count + 1):
            district = random.choice(list(DISTRICTS))
            sector = random.choice(DISTRICTS[district])
            owner = random.choice(citizens)
            parcel_number = f"{district[:3].upper()}-{index:05d}"

            if LandRecord.objects.filter(parcel_number=parcel_number).exists():
                continue

            land = lands.register_land(owner, {
                'parcel_number': parcel_number,
                'upi_number': f"1/02/{index:02d}/{random.randint(1000, 9999)}",
                'area_sqm': Decimal(random.choice([300, 450, 600, 900, 1200, 2500])),
                'district': district,
                'sector': sector,
                'cell': f"{sector} Cell {random.randint(1, 5)}",
                'village': f"Village {random.randint(1, 12)}",
                'land_use_type': random.choice(LandRecord.LandUse.values),
                'market_value': Decimal(random.randint(5, 80) * 1000000),
                'geometry': self._square(index),
            })
            lands.approve_land(land.pk, registrar)
            parcels.append(land)
            self.stdout.write(self.style.SUCCESS(f"Registered: {parcel_number} ({district})"))

        return parcels

    def seed_transfers(self, parcels, citizens):
        count = 0
        for index, land in enumerate(parcels[: len(parcels) // 3], 1):
            land.refresh_from_db()
            buyer = random.choice([citizen for citizen in citizens if citizen.pk != land.owner_id])
            transfers.initiate_transfer(
                land.owner,
                land_id=land.pk,
                new_owner_id=buyer.pk,
                transfer_number=f"TRF-{land.parcel_number}-{index:03d}",
                transfer_value=land.market_value,
                reason='Sale',
            )
            count += 1
        self.stdout.write(self.style.SUCCESS(f"Initiated {count} transfers"))

    def _user(self, username, role, first_name, last_name, **extra):
        user, created = User.objects.get_or_create(
            username=username,
            defaults=dict(role=role, first_name=first_name, last_name=last_name,
                          email=f"{username}@land.gov.rw", **extra),
        )
        if created:
            user.set_password('password123')
            user.save(update_fields=['password'])
        return user

    def _square(self, index):
        lng = KIGALI_LON + random.uniform(-0.05, 0.05)
        lat = KIGALI_LAT + random.uniform(-0.05, 0.05)
        size = 0.0002 + index * 0.00001
        ring = [[lng, lat], [lng + size, lat], [lng + size, lat + size], [lng, lat + size], [lng, lat]]
        return {'type': 'Polygon', 'coordinates': [ring]}
