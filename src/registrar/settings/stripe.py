from decouple import Csv, config

from .base import FRONTEND_BASE_URL

DEFAULT_CURRENCY = config("DEFAULT_CURRENCY", "USD")
STRIPE_SECRET_KEY = config("STRIPE_SECRET_KEY", default="sk_test_...")
STRIPE_PUBLISHABLE_KEY = config("STRIPE_PUBLISHABLE_KEY", default="pk_test_...")
STRIPE_WEBHOOK_SECRET = config("STRIPE_WEBHOOK_SECRET", default="whsec_...")
# Origins a checkout may redirect back to; anything else falls back to the frontend.
CHECKOUT_ALLOWED_ORIGINS = config("CHECKOUT_ALLOWED_ORIGINS", default=FRONTEND_BASE_URL, cast=Csv())
