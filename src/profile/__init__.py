"""Student profile models and the registration form state."""
