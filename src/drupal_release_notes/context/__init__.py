"""Clients for the external services the action talks to.

These modules wrap the drupal-mrn changelog API and the GitHub pull
request API behind small protocols so the orchestrator can be driven
by mock implementations in tests.
"""
