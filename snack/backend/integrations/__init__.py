"""
Outbound Integrations.

Stripe payments, Open Graph link previews, and transactional email.
Each client is exposed as a FastAPI dependency so it can be overridden.
"""
