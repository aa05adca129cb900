"""
Certificate Connector - client for a SaaS certificate issuance service

Submits certificate signing requests, waits for issuance, retrieves
chain-ordered PEM bundles and renews issued certificates through their
managed certificate identity.
"""

__version__ = "0.1.0"
