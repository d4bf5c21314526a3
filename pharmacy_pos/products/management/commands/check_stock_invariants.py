from django.core.management.base import BaseCommand, CommandError

from products.services.invariants import verify_stock_invariants


class Command(BaseCommand):
    help = "Reconcile batch, product and aggregate stock counters (read-only)"

    def add_arguments(self, parser):
        parser.add_argument(
            "--product",
            action="append",
            dest="product_ids",
            help="Restrict the check to a product id (repeatable)",
        )

    def handle(self, *args, **options):
        breaches = verify_stock_invariants(options.get("product_ids"))

        if not breaches:
            self.stdout.write(self.style.SUCCESS("Stock invariants hold."))
            return

        for breach in breaches:
            self.stderr.write(self.style.ERROR(str(breach)))

        raise CommandError(f"{len(breaches)} stock invariant breach(es) found")
