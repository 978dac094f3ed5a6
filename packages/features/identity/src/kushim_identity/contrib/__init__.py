"""Framework integrations for kushim-identity."""
