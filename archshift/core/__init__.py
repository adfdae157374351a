# Targeted imports only, e.g. `from archshift.core.graph import ArchitectureGraph`.
# Keeping this module empty lets the db layer load without the API stack.
