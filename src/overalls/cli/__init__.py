"""overalls command line interface."""
