"""Maritime back-office API."""
