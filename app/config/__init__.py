# =============================================================================
# Django Project Configuration Package
# =============================================================================
# This package contains the Django settings used to configure the
# stripe_gateway app and its shared client.
# =============================================================================
