"""
Management command to set up the Stripe product.

Every organization gets its own monthly price, but all prices hang off one
product. Run once per environment to create (or find) that product.
Usage: python manage.py setup_stripe
"""

from django.core.management.base import BaseCommand, CommandError

from apps.billing.stripe_client import get_stripe
from config.settings.base import settings

PRODUCT_METADATA_APP = "onboarding"


class Command(BaseCommand):
    help = "Set up the Stripe product that per-organization prices are created on"

    def add_arguments(self, parser):
        parser.add_argument(
            "--product-name",
            type=str,
            default="Organization Subscription",
            help="Product name in Stripe (default: Organization Subscription)",
        )
        parser.add_argument(
            "--force",
            action="store_true",
            help="Create a new product even if one exists",
        )

    def handle(self, *args, **options):
        if not settings.STRIPE_SECRET_KEY:
            raise CommandError("STRIPE_SECRET_KEY not set. Add it to your .env file first.")

        stripe = get_stripe()
        product_name = options["product_name"]

        self.stdout.write(f"Setting up Stripe product: {product_name}")

        if not options["force"]:
            products = stripe.Product.search(
                query=f"metadata['app']:'{PRODUCT_METADATA_APP}' AND active:'true'"
            )
            if products.data:
                product = products.data[0]
                self.stdout.write(self.style.WARNING(f"Found existing product: {product.id}"))
                self.stdout.write(
                    self.style.SUCCESS(
                        f"\nStripe already configured!\n"
                        f"Add this to your .env:\n\n"
                        f"STRIPE_PRODUCT_ID={product.id}\n"
                    )
                )
                return

        product = stripe.Product.create(
            name=product_name,
            description="Monthly organization subscription (price negotiated per organization)",
            metadata={"app": PRODUCT_METADATA_APP},
        )
        self.stdout.write(f"Created product: {product.id}")

        self.stdout.write(
            self.style.SUCCESS(
                f"\nStripe setup complete!\n"
                f"Add this to your .env:\n\n"
                f"STRIPE_PRODUCT_ID={product.id}\n"
            )
        )

        # Remind about webhook
        self.stdout.write(
            self.style.NOTICE(
                "\nDon't forget to set up your webhook endpoint:\n"
                "   Stripe Dashboard -> Developers -> Webhooks\n"
                "   URL: https://your-domain.com/webhooks/stripe/\n"
                "   Events: checkout.session.completed\n"
            )
        )
