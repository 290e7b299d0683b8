"""
Management command to create the UI pages that permissions are granted on

Usage:
    python manage.py seed_pages
"""
from django.core.management.base import BaseCommand
from qcportal.core.models import Page

# Parent page -> child pages, as shown in the navigation menu
PAGES = {
    'Admin': ['Users', 'UsersPermission'],
    'Masters': [
        'Divisions', 'Activities', 'Products', 'Resource Roles', 'Resources',
        'Error Categories', 'Error Sub Categories', 'Drawing Descriptions',
    ],
    'Project': ['Projects', 'Clarifications', 'Discrepancies', 'Time Management', 'Talent Management'],
}


class Command(BaseCommand):
    help = 'Create the default navigation pages used by user permissions'

    def handle(self, *args, **options):
        created_count = 0
        for parent_name, children in PAGES.items():
            parent, created = Page.objects.get_or_create(name=parent_name, defaults={'parent': None})
            created_count += int(created)
            for child_name in children:
                page, created = Page.objects.get_or_create(name=child_name, defaults={'parent': parent})
                if not created and page.parent_id != parent.id:
                    page.parent = parent
                    page.save(update_fields=['parent', 'updated_at'])
                created_count += int(created)
                self.stdout.write(f"  {parent_name} / {child_name}")

        self.stdout.write(self.style.SUCCESS(f"\n✅ Pages ready ({created_count} created, {Page.objects.count()} total)"))
