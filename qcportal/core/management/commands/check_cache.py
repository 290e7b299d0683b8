"""
Django management command to check the cache configuration.

Usage:
    python manage.py check_cache
"""
from django.core.management.base import BaseCommand
from django.core.cache import cache
from django.conf import settings

from qcportal.core.model_cache import (
    cache_master_list, get_cached_master_list, invalidate_master_list_cache,
    cache_project_options, get_cached_project_options, invalidate_project_options_cache,
)


class Command(BaseCommand):
    help = 'Check cache configuration and verify the list caches round-trip'

    def handle(self, *args, **options):
        self.stdout.write("=" * 60)
        self.stdout.write(self.style.SUCCESS("Cache Configuration Check"))
        self.stdout.write("=" * 60)

        self.stdout.write(f"\n1. Cache Backend: {settings.CACHES['default']['BACKEND']}")
        self.stdout.write(f"2. Cache Location: {settings.CACHES['default'].get('LOCATION', 'N/A')}")

        if 'django_redis' in settings.CACHES['default']['BACKEND']:
            try:
                from django_redis import get_redis_connection
                redis_conn = get_redis_connection("default")
                redis_conn.ping()
                version = redis_conn.info().get('redis_version', 'unknown')
                self.stdout.write(self.style.SUCCESS(f"✅ Redis connection: OK (server {version})"))
            except Exception as e:
                self.stdout.write(self.style.ERROR(f"❌ Redis connection: Failed ({str(e)})"))
        else:
            self.stdout.write(self.style.WARNING("⚠️  Using process-local memory cache (set REDIS_URL for Redis)"))

        self.stdout.write("\n3. Testing Cache Operations:")
        self.stdout.write("-" * 60)

        cache.set('check_cache_key', 'check_value', 60)
        if cache.get('check_cache_key') == 'check_value':
            self.stdout.write(self.style.SUCCESS("✅ Cache SET/GET: Success"))
        else:
            self.stdout.write(self.style.ERROR("❌ Cache GET: Failed (value mismatch)"))
        cache.delete('check_cache_key')

        self.stdout.write("\n4. Testing List Caches:")
        self.stdout.write("-" * 60)

        cache_master_list('CheckList', 'all', [{'id': 1}])
        if get_cached_master_list('CheckList', 'all') == [{'id': 1}]:
            self.stdout.write(self.style.SUCCESS("✅ Master list cache: Success"))
        else:
            self.stdout.write(self.style.ERROR("❌ Master list cache: Failed"))
        invalidate_master_list_cache('CheckList')

        if get_cached_project_options() is None:
            cache_project_options([{'value': 0, 'label': 'Select a project'}])
            ok = get_cached_project_options() is not None
            invalidate_project_options_cache()
            if ok:
                self.stdout.write(self.style.SUCCESS("✅ Project options cache: Success"))
            else:
                self.stdout.write(self.style.ERROR("❌ Project options cache: Failed"))
        else:
            self.stdout.write(self.style.SUCCESS("✅ Project options cache: populated"))

        self.stdout.write("\n" + "=" * 60)
        self.stdout.write(self.style.WARNING("If anything failed:"))
        self.stdout.write("   1. Check REDIS_URL in .env file")
        self.stdout.write("   2. Verify django-redis is installed: pip install django-redis")
        self.stdout.write("=" * 60)
