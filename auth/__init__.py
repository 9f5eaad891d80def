"""auth/ -- User accounts, credentials, and bearer tokens for myFlix.

Layer rule: auth/ imports only stdlib, third-party libraries, and core/.
It does NOT import from api/ or catalog/.
api/ imports from auth/, not the other way around.
"""
