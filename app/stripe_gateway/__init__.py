"""
Stripe gateway client.

Customer, subscription, coupon, invoice and payment source operations on
Stripe exposed as simple method calls.

Layers:
    - client: StripeGatewayClient facade, the result boundary
    - services: business rules (unique email, one subscription per customer)
    - adapters: one Stripe call per method, error translation, logging
    - pagination: walks a listing endpoint to completion

Usage:
    from stripe_gateway.client import StripeGatewayClient

    client = StripeGatewayClient.from_api_key("sk_test_...")
    result = client.create_subscription_for_customer_and_charge(
        "ada@example.com", "gold-monthly"
    )

Inside a Django project, add "stripe_gateway" to INSTALLED_APPS, set
STRIPE_ENABLED and STRIPE_SECRET_KEY, and use
stripe_gateway.client.get_gateway_client().
"""
