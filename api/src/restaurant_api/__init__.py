"""FastAPI application for restaurant payments.

Exposes the Stripe webhook receiver, deposit and checkout endpoints, and
health checks. The Lambda entry point is ``restaurant_api.main.handler``.
"""
