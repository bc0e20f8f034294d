"""Request pipelines composed from the service layer."""
