# armory_api/services/__init__.py
"""Read-modify-write operations shared by the routers."""
