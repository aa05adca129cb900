"""Ports - contracts between the connector core and the outside world."""
