from django.core.management.base import BaseCommand
from movements.services import expire_movements


class Command(BaseCommand):
    help = "Expire pending single movements whose confirmation link has lapsed."

    def handle(self, *args, **options):
        count = expire_movements()
        self.stdout.write(self.style.SUCCESS(f"Expired movements: {count}"))
