"""
Management command to add the default master data rows

Usage:
    python manage.py seed_masters [--clear]
"""
from django.core.management.base import BaseCommand
from django.db import transaction
from qcportal.core.cache_signals import suspend_cache_signals, invalidate_all_lists
from qcportal.masters.models import ErrorCategory, ErrorSubCategory, ResourceRole

ERROR_CATEGORIES = {
    'Dimensional': ['Tolerance', 'Measurement', 'Fit'],
    'Documentation': ['Missing Information', 'Incorrect Reference', 'Ambiguity'],
    'Material': ['Specification', 'Compatibility', 'Property'],
    'Visual': ['Assembly', 'Layout', 'Annotation'],
    'Reference': ['Part Number', 'Standard', 'Specification'],
    'Technical': ['Calculation', 'Performance', 'Safety'],
}

RESOURCE_ROLES = ['Powell EDH Manager', 'Powell EDH Engineer']


class Command(BaseCommand):
    help = "Adds the default error categories, sub-categories and resource roles"

    def add_arguments(self, parser):
        parser.add_argument(
            '--clear',
            action='store_true',
            help='Retire (isLive=false) all existing error categories and sub-categories first',
        )

    def handle(self, *args, **options):
        self.stdout.write(self.style.SUCCESS("=" * 60))
        self.stdout.write(self.style.SUCCESS("SEEDING MASTER DATA"))
        self.stdout.write(self.style.SUCCESS("=" * 60))

        created_count = 0
        skipped_count = 0

        with suspend_cache_signals(), transaction.atomic():
            if options['clear']:
                self.stdout.write(self.style.WARNING("Retiring existing error categories..."))
                ErrorSubCategory.objects.update(is_live=False)
                ErrorCategory.objects.update(is_live=False)

            for category_name, sub_names in ERROR_CATEGORIES.items():
                category, created = ErrorCategory.objects.get_or_create(name=category_name)
                if not created and not category.is_live:
                    category.is_live = True
                    category.save(update_fields=['is_live', 'updated_at'])
                created_count, skipped_count = self._tally(category_name, created, created_count, skipped_count)

                for sub_name in sub_names:
                    sub, created = ErrorSubCategory.objects.get_or_create(category=category, name=sub_name)
                    if not created and not sub.is_live:
                        sub.is_live = True
                        sub.save(update_fields=['is_live', 'updated_at'])
                    created_count, skipped_count = self._tally(
                        f"{category_name} / {sub_name}", created, created_count, skipped_count
                    )

            for role_name in RESOURCE_ROLES:
                _, created = ResourceRole.objects.get_or_create(name=role_name)
                created_count, skipped_count = self._tally(role_name, created, created_count, skipped_count)

        invalidate_all_lists()

        self.stdout.write(self.style.SUCCESS("\n" + "=" * 60))
        self.stdout.write(f"Rows Created: {created_count}")
        self.stdout.write(f"Rows Skipped (already exist): {skipped_count}")
        self.stdout.write(self.style.SUCCESS("=" * 60))

    def _tally(self, label, created, created_count, skipped_count):
        if created:
            self.stdout.write(self.style.SUCCESS(f"  ✓ Created: {label}"))
            return created_count + 1, skipped_count
        self.stdout.write(self.style.WARNING(f"  ⊘ Skipped (already exists): {label}"))
        return created_count, skipped_count + 1
