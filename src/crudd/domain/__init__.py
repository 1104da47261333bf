"""Domain models shared by the catalog, the runner and the web layer."""
