from django.core.management.base import BaseCommand
from movements.bulk_services import expire_bulk_movements


class Command(BaseCommand):
    help = "Expire pending and in-transit bulk movements whose confirmation link has lapsed."

    def handle(self, *args, **options):
        count = expire_bulk_movements()
        self.stdout.write(self.style.SUCCESS(f"Expired bulk movements: {count}"))
