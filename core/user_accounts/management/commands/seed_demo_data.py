"""
Seed Demo Data

Populates the database with a small, realistic data set:
- One super administrator and two administrators
- Three schools, one per school type
- One director per school and two teachers per school

Usage:
    python manage.py seed_demo_data
    python manage.py seed_demo_data --password "S3cure-pass"

This is idempotent - safe to run multiple times.
"""
import os

from django.core.management.base import BaseCommand
from django.db import transaction

from campus.schools.models import School, SchoolType
from core.access.roles import Role
from core.user_accounts.models import CustomUser


SCHOOLS = [
    {
        'name': 'Escuela Primaria Central',
        'code': 'EPC001',
        'type': SchoolType.PUBLIC,
        'address': 'Calle Principal 123',
        'district': 'Distrito Central',
        'phone': '+1234567890',
        'email': 'epc001@school.edu',
    },
    {
        'name': 'Instituto Secundario Moderno',
        'code': 'ISM002',
        'type': SchoolType.PRIVATE,
        'address': 'Avenida Libertad 456',
        'district': 'Distrito Norte',
        'phone': '+1234567891',
        'email': 'ism002@school.edu',
    },
    {
        'name': 'Colegio Técnico Nacional',
        'code': 'CTN003',
        'type': SchoolType.SUBSIDIZED,
        'address': 'Boulevard Tecnológico 789',
        'district': 'Distrito Sur',
        'phone': '+1234567892',
        'email': 'ctn003@school.edu',
    },
]

ADMINS = [
    ('admin1@admin.com', 'Admin Usuario 1'),
    ('admin2@admin.com', 'Admin Usuario 2'),
]

# (email, name, school code)
DIRECTORS = [
    ('director1@school.edu', 'Director Primaria Central', 'EPC001'),
    ('director2@school.edu', 'Director Instituto Moderno', 'ISM002'),
    ('director3@school.edu', 'Director Colegio Técnico', 'CTN003'),
]

TEACHERS = [
    ('profesor1@school.edu', 'Profesor María González', 'EPC001'),
    ('profesor2@school.edu', 'Profesor Juan Pérez', 'EPC001'),
    ('profesor3@school.edu', 'Profesora Ana Martínez', 'ISM002'),
    ('profesor4@school.edu', 'Profesor Carlos Rodríguez', 'ISM002'),
    ('profesor5@school.edu', 'Profesora Laura Sánchez', 'CTN003'),
    ('profesor6@school.edu', 'Profesor Miguel Torres', 'CTN003'),
]


class Command(BaseCommand):
    help = 'Seed demo schools and accounts for every role'

    def add_arguments(self, parser):
        parser.add_argument(
            '--password',
            default=os.environ.get('SEED_DEFAULT_PASSWORD', 'ChangeMe123'),
            help='Password given to every seeded account'
        )
        parser.add_argument(
            '--superadmin-email',
            default=os.environ.get('SEED_SUPERADMIN_EMAIL', 'superadmin@admin.com'),
        )

    def handle(self, *args, **options):
        password = options['password']
        self.stdout.write('Starting demo data seeding...\n')

        with transaction.atomic():
            self._user(options['superadmin_email'], 'Super Administrador', Role.SUPER_ADMIN, password)

            for email, name in ADMINS:
                self._user(email, name, Role.ADMIN, password)

            schools = {}
            for data in SCHOOLS:
                school, created = School.objects.active().get_or_create(
                    code=data['code'],
                    defaults=data
                )
                schools[school.code] = school
                label = 'Created' if created else 'Already exists'
                self.stdout.write(f"  {label}: school {school.code}")

            for email, name, code in DIRECTORS:
                self._user(email, name, Role.DIRECTOR, password, school=schools[code])

            for email, name, code in TEACHERS:
                self._user(email, name, Role.PROFESOR, password, school=schools[code])

        self.stdout.write(self.style.SUCCESS('\nDemo data seeded.'))
        self.stdout.write(self.style.WARNING('All seeded accounts share the same password; change it after first login.'))

    def _user(self, email, name, role, password, school=None):
        user = CustomUser.objects.filter(email=email).first()
        if user is not None:
            self.stdout.write(f"  Already exists: {role} {email}")
            return user

        user = CustomUser.objects.create_user(
            email=email,
            name=name,
            password=password,
            role=role,
            school=school,
        )
        self.stdout.write(f"  Created: {role} {email}")
        return user
