"""catalog/ -- Product records and their persistence.

Layer rule: catalog/ imports only stdlib, third-party libraries and core/.
It does NOT import from api/ or auth/.
"""
