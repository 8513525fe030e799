from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Organization",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=255)),
                (
                    "subdomain",
                    models.SlugField(
                        help_text="URL-safe identifier derived from the name, e.g. 'denver-hiking'",
                        unique=True,
                    ),
                ),
                ("contact_name", models.CharField(max_length=255)),
                ("contact_email", models.EmailField(max_length=254)),
                ("contact_phone", models.CharField(blank=True, max_length=50)),
                ("address", models.CharField(blank=True, max_length=255)),
                ("city", models.CharField(blank=True, max_length=100)),
                ("state", models.CharField(blank=True, max_length=100)),
                ("zip_code", models.CharField(blank=True, max_length=20)),
                (
                    "monthly_fee",
                    models.DecimalField(
                        decimal_places=2,
                        help_text="Negotiated monthly fee; fixed at creation",
                        max_digits=10,
                    ),
                ),
                ("storage_limit_gb", models.PositiveIntegerField(default=1)),
                ("storage_used_gb", models.DecimalField(decimal_places=3, default=0, max_digits=10)),
                ("file_count", models.PositiveIntegerField(default=0)),
                (
                    "subscription_status",
                    models.CharField(
                        choices=[
                            ("pending_payment", "Pending Payment"),
                            ("active", "Active"),
                            ("suspended", "Suspended"),
                        ],
                        db_index=True,
                        default="pending_payment",
                        max_length=20,
                    ),
                ),
                (
                    "payment_status",
                    models.CharField(
                        choices=[
                            ("pending", "Pending"),
                            ("good_standing", "Good Standing"),
                            ("past_due", "Past Due"),
                        ],
                        default="pending",
                        max_length=20,
                    ),
                ),
                (
                    "onboarding_step",
                    models.CharField(
                        choices=[
                            ("price_created", "Price Created"),
                            ("checkout_created", "Checkout Created"),
                            ("activated", "Activated"),
                            ("admin_invited", "Admin Invited"),
                            ("abandoned", "Abandoned"),
                        ],
                        db_index=True,
                        default="price_created",
                        help_text="Last completed onboarding saga step",
                        max_length=20,
                    ),
                ),
                (
                    "stripe_price_id",
                    models.CharField(
                        blank=True,
                        help_text="Per-organization Stripe price ID, e.g. 'price_xxx'",
                        max_length=255,
                    ),
                ),
                (
                    "stripe_checkout_session_id",
                    models.CharField(
                        blank=True,
                        db_index=True,
                        help_text="Latest Stripe Checkout session ID, e.g. 'cs_xxx'",
                        max_length=255,
                    ),
                ),
                ("checkout_url", models.URLField(blank=True, max_length=2048)),
                (
                    "stripe_customer_id",
                    models.CharField(
                        blank=True,
                        help_text="Stripe customer ID, e.g. 'cus_xxx'; set once at activation",
                        max_length=255,
                        null=True,
                    ),
                ),
                (
                    "stripe_subscription_id",
                    models.CharField(
                        blank=True,
                        help_text="Stripe subscription ID, e.g. 'sub_xxx'; set once at activation",
                        max_length=255,
                        null=True,
                    ),
                ),
                (
                    "stytch_org_id",
                    models.CharField(
                        blank=True,
                        help_text="Stytch organization_id, e.g. 'organization-xxx'",
                        max_length=255,
                        null=True,
                        unique=True,
                    ),
                ),
                ("activated_at", models.DateTimeField(blank=True, null=True)),
                ("admin_invited_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["-created_at"],
            },
        ),
        migrations.AddIndex(
            model_name="organization",
            index=models.Index(
                fields=["subscription_status", "onboarding_step", "created_at"],
                name="org_onboarding_sweep_idx",
            ),
        ),
    ]
