"""REST daemon and command-line client for the file explorer."""
