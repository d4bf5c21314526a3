from datetime import timedelta
from decimal import Decimal

from django.core.management.base import BaseCommand, CommandError
from django.utils import timezone

from products.models import Product
from products.services.exceptions import StockLedgerError
from purchases.models import Supplier
from purchases.services.receiving_service import approve_receiving, create_receiving_draft


class Command(BaseCommand):
    help = "Seed demo products and receive stock for them through the receiving workflow"

    PRODUCTS = [
        ("AMOX-500", "Amoxicillin 500mg", "1200.00", 20),
        ("PARA-500", "Paracetamol 500mg", "300.00", 50),
        ("VITA-C", "Vitamin C 1000mg", "800.00", 10),
        ("LORA-10", "Loratadine 10mg", "650.00", 10),
        ("OMEP-20", "Omeprazole 20mg", "900.00", 15),
    ]

    def add_arguments(self, parser):
        parser.add_argument(
            "--no-approve",
            action="store_true",
            help="Leave the receiving record as a DRAFT (no stock impact)",
        )

    def handle(self, *args, **options):
        self.stdout.write(self.style.WARNING("Seeding products and stock..."))

        supplier, _ = Supplier.objects.get_or_create(name="Demo Supplier")

        today = timezone.localdate()
        stamp = timezone.now().strftime("%Y%m%d%H%M%S")
        lines = []

        for index, (sku, name, price, min_stock) in enumerate(self.PRODUCTS):
            product, _ = Product.objects.get_or_create(
                sku=sku,
                defaults={
                    "name": name,
                    "sale_price": Decimal(price),
                    "min_stock": min_stock,
                },
            )
            # one short-dated and one long-dated lot per product
            for offset, days in enumerate((150, 540)):
                lines.append(
                    {
                        "product_id": product.pk,
                        "batch_code": f"{sku}-{stamp}-{offset + 1}",
                        "expiry_date": today + timedelta(days=days + index * 30),
                        "quantity_received": 20 + 10 * offset,
                        "purchase_price": Decimal(price) / 2,
                    }
                )

        try:
            record = create_receiving_draft(
                supplier_id=supplier.pk,
                invoice_number=f"SEED-{stamp}",
                lines=lines,
                record_type="seed",
            )
            if not options["no_approve"]:
                record = approve_receiving(record_id=record.pk)
        except StockLedgerError as exc:
            raise CommandError(f"Seeding failed: {exc.message}") from exc

        self.stdout.write(
            self.style.SUCCESS(
                f"Receiving {record.invoice_number} {record.status} with {len(lines)} batch(es)."
            )
        )
