from django.apps import AppConfig


class PaymentsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "payments"
    verbose_name = "Payments"

    def ready(self):
        import stripe
        from django.conf import settings

        # Process-wide SDK setting; applied once at startup
        stripe.max_network_retries = settings.STRIPE_MAX_NETWORK_RETRIES
