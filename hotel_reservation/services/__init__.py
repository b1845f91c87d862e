"""Business services of the reservation engine."""
