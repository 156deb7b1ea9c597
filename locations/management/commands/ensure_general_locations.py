from django.conf import settings
from django.core.management.base import BaseCommand
from locations.services import ensure_general_locations


class Command(BaseCommand):
    help = "Create the shared General location for each area (defaults to DEFAULT_AREAS)."

    def add_arguments(self, parser):
        parser.add_argument("areas", nargs="*", help="Area labels; falls back to settings.DEFAULT_AREAS")

    def handle(self, *args, **options):
        areas = options["areas"] or list(getattr(settings, "DEFAULT_AREAS", []))
        locations = ensure_general_locations(areas=areas)
        for location in locations:
            self.stdout.write(f"{location.area}: {location.code}")
        self.stdout.write(self.style.SUCCESS(f"General locations ensured: {len(locations)}"))
