"""Process-level services shared by every lens component."""
