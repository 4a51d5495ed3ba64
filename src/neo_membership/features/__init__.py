"""Feature modules for neo-membership."""
